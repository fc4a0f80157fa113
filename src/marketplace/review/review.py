"""Review aggregate: a buyer's rating of a product they received."""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, Text, ValueObject

from marketplace.domain import marketplace
from marketplace.review.events import ReviewSubmitted, SellerReplied


@marketplace.value_object(part_of="Review")
class SellerReply:
    comment = Text(required=True)
    replied_at = DateTime(required=True)


@marketplace.aggregate
class Review:
    product_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text(required=True)
    images = Text()  # JSON: list of image references
    seller_reply = ValueObject(SellerReply)
    is_verified_purchase = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def submit(cls, product_id, buyer_id, order_id, rating, comment, images=None):
        if not comment or not comment.strip():
            raise ValidationError({"comment": ["Comment is required"]})

        now = datetime.now(UTC)
        review = cls(
            product_id=product_id,
            buyer_id=buyer_id,
            order_id=order_id,
            rating=rating,
            comment=comment.strip(),
            images=json.dumps(list(images or [])),
            is_verified_purchase=True,
            created_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                buyer_id=str(buyer_id),
                order_id=str(order_id),
                rating=rating,
                created_at=now,
            )
        )
        return review

    def reply(self, seller_id, comment):
        if not comment or not comment.strip():
            raise ValidationError({"comment": ["Reply cannot be empty"]})

        now = datetime.now(UTC)
        self.seller_reply = SellerReply(comment=comment.strip(), replied_at=now)
        self.raise_(
            SellerReplied(
                review_id=str(self.id),
                seller_id=str(seller_id),
                comment=self.seller_reply.comment,
                replied_at=now,
            )
        )

    def image_list(self):
        return json.loads(self.images) if self.images else []
