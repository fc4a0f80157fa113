"""Order aggregate (CQRS): a buyer's purchase across one or more sellers.

Lines snapshot the product at purchase time (name, price, size, image), so an
order stays readable after the product is edited or withdrawn.

Status values:
    order placed → processing → out for delivery → delivered
    any non-terminal status → cancelled

Who may move an order between statuses is decided by
``marketplace.order.access``. The aggregate only refuses to leave the
terminal statuses (delivered, cancelled) and keeps the history log.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.errors import EmptyOrder, InvalidStatus, OrderClosed
from marketplace.order.events import OrderLineReviewed, OrderPlaced, OrderStatusUpdated


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    ORDER_PLACED = "order placed"
    PROCESSING = "processing"
    OUT_FOR_DELIVERY = "out for delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatus(value) from None


class PaymentMethod(Enum):
    COD = "cod"
    CARD = "card"
    GCASH = "gcash"
    PAYMAYA = "paymaya"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


_TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

PLACEMENT_NOTE = "Order has been placed"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Where the order is delivered, as given at checkout."""

    name = String(max_length=255)
    street = String(max_length=255)
    city = String(max_length=100)
    province = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)
    phone = String(max_length=50)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    size = String(max_length=20)
    variation_name = String(max_length=100)
    variation_value = String(max_length=100)
    image = String(max_length=500)
    has_review = Boolean(default=False)

    @property
    def line_total(self):
        return self.price * self.quantity


@marketplace.entity(part_of="Order")
class StatusChange:
    """One entry in the order's append-only status log."""

    status = String(required=True, choices=OrderStatus)
    note = Text()
    changed_at = DateTime(required=True)
    changed_by = Identifier()
    sequence = Integer(required=True, min_value=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    order_number = String(required=True, unique=True, max_length=50)
    buyer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.ORDER_PLACED.value)
    status_history = HasMany(StatusChange)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    placed_at = DateTime()
    delivered_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, buyer_id, lines, shipping_address=None, payment_method=None):
        """Record a placed order.

        The total is always computed here from the lines; no caller-supplied
        total is accepted.

        Args:
            lines: List of dicts with product_id, seller_id, name, quantity,
                   price and optionally size, variation_name,
                   variation_value and image.
            shipping_address: Dict with name, street, city, province,
                              postal_code, country and phone.
        """
        if not lines:
            raise EmptyOrder()

        now = datetime.now(UTC)
        items = [OrderItem(**line) for line in lines]
        total_amount = sum(item.line_total for item in items)

        order = cls(
            order_number=order_number,
            buyer_id=buyer_id,
            items=items,
            total_amount=total_amount,
            status=OrderStatus.ORDER_PLACED.value,
            status_history=[
                StatusChange(
                    status=OrderStatus.ORDER_PLACED.value,
                    note=PLACEMENT_NOTE,
                    changed_at=now,
                    changed_by=buyer_id,
                    sequence=0,
                )
            ],
            shipping_address=ShippingAddress(**shipping_address) if shipping_address else None,
            payment_method=payment_method or PaymentMethod.COD.value,
            payment_status=PaymentStatus.PENDING.value,
            placed_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                buyer_id=str(buyer_id),
                items=json.dumps([_line_payload(item) for item in order.items]),
                seller_ids=json.dumps(order.seller_ids()),
                total_amount=total_amount,
                payment_method=order.payment_method,
                status=order.status,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def seller_ids(self):
        """Distinct seller ids, in the order their first line appears."""
        seen = []
        for item in self.items:
            seller_id = str(item.seller_id)
            if seller_id not in seen:
                seen.append(seller_id)
        return seen

    def sells(self, seller_id):
        return seller_id is not None and str(seller_id) in self.seller_ids()

    def lines_for_seller(self, seller_id):
        return [item for item in self.items if str(item.seller_id) == str(seller_id)]

    def history(self):
        return sorted(self.status_history, key=lambda change: change.sequence)

    # -------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------
    def change_status(self, status, changed_by, note=None):
        """Move the order to ``status`` and append the change to its history.

        ``status`` is an ``OrderStatus`` member or its literal string value.
        """
        target = OrderStatus.parse(status)
        current = OrderStatus(self.status)
        if current in _TERMINAL_STATUSES:
            raise OrderClosed(current.value)

        now = datetime.now(UTC)
        note = note or f"Order status updated to {target.value}"

        self.status = target.value
        self.add_status_history(
            StatusChange(
                status=target.value,
                note=note,
                changed_at=now,
                changed_by=changed_by,
                sequence=len(self.status_history),
            )
        )
        if target == OrderStatus.DELIVERED:
            self.delivered_at = now
        self.updated_at = now

        self.raise_(
            OrderStatusUpdated(
                order_id=str(self.id),
                order_number=self.order_number,
                buyer_id=str(self.buyer_id),
                seller_ids=json.dumps(self.seller_ids()),
                previous_status=current.value,
                status=target.value,
                note=note,
                changed_by=str(changed_by),
                changed_at=now,
            )
        )

    def mark_reviewed(self, product_id, review_id):
        """Flag the order's line(s) for ``product_id`` as reviewed."""
        lines = [item for item in self.items if str(item.product_id) == str(product_id)]
        if not lines:
            raise ValidationError({"product_id": ["Product is not part of this order"]})

        for item in lines:
            item.has_review = True
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderLineReviewed(
                order_id=str(self.id),
                product_id=str(product_id),
                review_id=str(review_id),
            )
        )


def _line_payload(item):
    return {
        "product_id": str(item.product_id),
        "seller_id": str(item.seller_id),
        "name": item.name,
        "quantity": item.quantity,
        "price": item.price,
        "size": item.size,
    }
