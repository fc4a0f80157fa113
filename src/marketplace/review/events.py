"""Domain events for the Review aggregate."""

from protean.fields import DateTime, Identifier, Integer, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Review")
class ReviewSubmitted:
    """A buyer reviewed a product from one of their delivered orders."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Review")
class SellerReplied:
    """The product's seller answered a review."""

    __version__ = 1

    review_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    comment = Text(required=True)
    replied_at = DateTime(required=True)
