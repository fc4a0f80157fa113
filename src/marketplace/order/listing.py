"""Order read paths for buyers, sellers and single-order views."""

from dataclasses import dataclass, field
from datetime import UTC

from protean.utils.globals import current_domain

from marketplace.errors import Forbidden
from marketplace.order.access import may_view
from marketplace.order.order import Order, OrderStatus
from marketplace.projections.seller_orders import SellerOrders


@dataclass
class SellerOrderView:
    """An order as one seller sees it: only that seller's lines, and their total."""

    order: Order
    items: list = field(default_factory=list)
    total_amount: float = 0.0

    @property
    def id(self):
        return self.order.id


def orders_for_buyer(buyer_id) -> list[Order]:
    """The buyer's orders, newest first."""
    repo = current_domain.repository_for(Order)
    orders = repo._dao.query.filter(buyer_id=str(buyer_id)).all().items
    return sorted(orders, key=lambda order: order.placed_at, reverse=True)


def orders_for_seller(seller_id, status=None) -> list[SellerOrderView]:
    """Orders with at least one of the seller's lines, newest first.

    ``status`` narrows the result to orders currently in that status.
    """
    if status is not None:
        status = OrderStatus.parse(status).value

    entries = current_domain.repository_for(SellerOrders)._dao.query.filter(seller_id=str(seller_id)).all().items
    if status is not None:
        entries = [entry for entry in entries if entry.status == status]

    repo = current_domain.repository_for(Order)
    views = []
    for entry in entries:
        order = repo.get(entry.order_id)
        lines = order.lines_for_seller(seller_id)
        views.append(
            SellerOrderView(
                order=order,
                items=lines,
                total_amount=sum(line.line_total for line in lines),
            )
        )
    return sorted(views, key=lambda view: view.order.placed_at, reverse=True)


def order_for_actor(order_id, actor) -> Order:
    """Load one order for its buyer, a seller of one of its lines, or an admin."""
    order = current_domain.repository_for(Order).find(order_id)
    if not may_view(actor, order):
        raise Forbidden("Access denied")
    return order


def _utc(moment):
    return moment.replace(tzinfo=UTC) if moment.tzinfo is None else moment


def all_orders(status=None, placed_from=None, placed_to=None, page=1, limit=20) -> tuple[list[Order], int]:
    """Every order on the platform, newest first, one page at a time.

    Filters by current ``status`` and by a ``placed_at`` window (both ends
    inclusive). Returns the page and the number of matching orders.
    """
    orders = current_domain.repository_for(Order)._dao.query.all().items

    if status is not None:
        status = OrderStatus.parse(status).value
        orders = [order for order in orders if order.status == status]
    if placed_from is not None:
        orders = [order for order in orders if _utc(order.placed_at) >= _utc(placed_from)]
    if placed_to is not None:
        orders = [order for order in orders if _utc(order.placed_at) <= _utc(placed_to)]

    orders.sort(key=lambda order: _utc(order.placed_at), reverse=True)
    start = (page - 1) * limit
    return orders[start : start + limit], len(orders)
