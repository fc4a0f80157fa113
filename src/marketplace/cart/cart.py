"""Cart aggregate (CQRS): the lines a buyer has picked but not yet ordered.

One cart per buyer, created on first use. Adding a product that is already
in the cart with the same size and variation grows the existing line
instead of adding a second one. Stock is checked when lines are added or
resized but never reserved; placement checks it again under lock.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartSynced,
)
from marketplace.domain import marketplace
from marketplace.errors import NotFound


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    seller_id = Identifier()
    name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(min_value=0.0)
    size = String(max_length=20)
    variation_name = String(max_length=100)
    variation_value = String(max_length=100)
    image = String(max_length=500)
    added_at = DateTime()

    @property
    def line_total(self):
        return (self.price or 0.0) * self.quantity

    def matches(self, product_id, size=None, variation_name=None, variation_value=None):
        return (
            str(self.product_id) == str(product_id)
            and self.size == size
            and self.variation_name == variation_name
            and self.variation_value == variation_value
        )


@marketplace.aggregate
class Cart:
    buyer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    updated_at = DateTime()

    @classmethod
    def create(cls, buyer_id):
        return cls(buyer_id=buyer_id, updated_at=datetime.now(UTC))

    @property
    def total_amount(self):
        return sum(item.line_total for item in self.items)

    def line(self, item_id) -> CartItem:
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFound("Cart item", item_id)
        return item

    def existing_line(self, product_id, size=None, variation_name=None, variation_value=None):
        return next(
            (i for i in self.items if i.matches(product_id, size, variation_name, variation_value)),
            None,
        )

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, size=None, variation_name=None, variation_value=None, **details):
        """Add a line, or grow the matching line by ``quantity``.

        ``details`` carries the product snapshot: seller_id, name, price, image.
        """
        now = datetime.now(UTC)
        existing = self.existing_line(product_id, size, variation_name, variation_value)

        if existing:
            existing.quantity += quantity
            item_id = str(existing.id)
        else:
            item = CartItem(
                product_id=product_id,
                quantity=quantity,
                size=size,
                variation_name=variation_name,
                variation_value=variation_value,
                added_at=now,
                **details,
            )
            self.add_items(item)
            item_id = str(item.id)

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product_id),
                size=size,
                quantity=quantity,
            )
        )
        return item_id

    def update_item_quantity(self, item_id, quantity):
        item = self.line(item_id)
        previous = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def remove_item(self, item_id):
        self.remove_items(self.line(item_id))
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self):
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))

    def replace_items(self, lines, dropped=0):
        """Replace every line with ``lines`` (dicts of CartItem fields)."""
        now = datetime.now(UTC)
        for item in list(self.items):
            self.remove_items(item)
        for line in lines:
            self.add_items(CartItem(added_at=now, **line))
        self.updated_at = now

        self.raise_(CartSynced(cart_id=str(self.id), items_kept=len(lines), items_dropped=dropped))
