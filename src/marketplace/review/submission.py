"""SubmitReview: a buyer reviews a product from a delivered order.

The review, the order line's ``has_review`` flag and the product's rating
aggregate are written in the same unit of work.
"""

import json

import structlog
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.errors import Forbidden
from marketplace.order.order import Order, OrderStatus
from marketplace.product.product import Product
from marketplace.review.review import Review

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Review")
class SubmitReview:
    buyer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text(required=True)
    images = Text()  # JSON array of image references


@marketplace.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.find(command.order_id)

        if str(order.buyer_id) != str(command.buyer_id):
            raise Forbidden("Not authorized")
        if order.status != OrderStatus.DELIVERED.value:
            raise ValidationError({"order_id": ["Can only review delivered orders"]})
        if not any(str(item.product_id) == str(command.product_id) for item in order.items):
            raise ValidationError({"product_id": ["Product not in this order"]})

        repo = current_domain.repository_for(Review)
        existing = repo._dao.query.filter(
            product_id=str(command.product_id),
            buyer_id=str(command.buyer_id),
            order_id=str(command.order_id),
        ).all()
        if existing.items:
            raise ValidationError({"review": ["You have already reviewed this product"]})

        review = Review.submit(
            product_id=command.product_id,
            buyer_id=command.buyer_id,
            order_id=command.order_id,
            rating=command.rating,
            comment=command.comment,
            images=json.loads(command.images) if command.images else [],
        )

        order.mark_reviewed(command.product_id, review.id)

        earlier = repo._dao.query.filter(product_id=str(command.product_id)).all().items
        product_repo = current_domain.repository_for(Product)
        product = product_repo.get(command.product_id)
        product.record_rating([r.rating for r in earlier] + [review.rating])

        repo.add(review)
        order_repo.add(order)
        product_repo.add(product)

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            product_id=str(command.product_id),
            rating=review.rating,
            product_rating=product.rating.average,
        )
        return str(review.id)
