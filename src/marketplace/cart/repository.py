"""Lookups over the Cart aggregate."""

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace


@marketplace.repository(part_of=Cart)
class CartRepository:
    def for_buyer(self, buyer_id) -> Cart | None:
        carts = self._dao.query.filter(buyer_id=str(buyer_id)).all().items
        return carts[0] if carts else None

    def open_for(self, buyer_id) -> Cart:
        """The buyer's cart, or a new empty one that is not yet persisted."""
        cart = self.for_buyer(buyer_id)
        return cart if cart is not None else Cart.create(buyer_id)
