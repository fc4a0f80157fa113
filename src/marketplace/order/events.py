"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A buyer placed an order and its stock was taken."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    buyer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line dicts, seller ids included
    seller_ids = Text(required=True)  # JSON: distinct seller ids in line order
    total_amount = Float(required=True)
    payment_method = String(required=True)
    status = String(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusUpdated:
    """An order moved to a new status and the change was logged in its history."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    buyer_id = Identifier(required=True)
    seller_ids = Text(required=True)  # JSON: distinct seller ids
    previous_status = String(required=True)
    status = String(required=True)
    note = Text()
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderLineReviewed:
    """The buyer reviewed one of the order's products."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    review_id = Identifier(required=True)
