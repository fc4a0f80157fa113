"""ReplyToReview: the product's seller answers a review."""

from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.errors import Forbidden
from marketplace.product.product import Product
from marketplace.review.review import Review


@marketplace.command(part_of="Review")
class ReplyToReview:
    review_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    comment = Text(required=True)


@marketplace.command_handler(part_of=Review)
class ReplyToReviewHandler:
    @handle(ReplyToReview)
    def reply_to_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        product = current_domain.repository_for(Product).get(review.product_id)
        if str(product.seller_id) != str(command.seller_id):
            raise Forbidden("Not authorized to reply to this review")

        review.reply(command.seller_id, command.comment)
        repo.add(review)
