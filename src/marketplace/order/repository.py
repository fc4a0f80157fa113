"""Lookups over the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from marketplace.domain import marketplace
from marketplace.errors import NotFound
from marketplace.order.order import Order


@marketplace.repository(part_of=Order)
class OrderRepository:
    def find(self, order_id) -> Order:
        """Load an order, raising ``NotFound`` naming it when there is none."""
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            raise NotFound("Order", order_id) from None

    def number_taken(self, order_number) -> bool:
        return bool(self._dao.query.filter(order_number=order_number).all().items)
