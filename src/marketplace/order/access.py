"""Who may move an order to which status.

The acting identity is classified once against the order, then a single
table decides. A seller of any line and an administrator may set any
status. The buyer may only confirm delivery of an order that is out for
delivery. Everyone else is refused.
"""

from enum import Enum

from marketplace.errors import Forbidden
from marketplace.order.order import OrderStatus


class OrderRole(Enum):
    ADMIN = "admin"
    SELLER = "seller"
    BUYER = "buyer"
    OUTSIDER = "outsider"


_BUYER_TRANSITIONS = {(OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED)}


def role_on_order(actor, order) -> OrderRole:
    """Classify ``actor`` against ``order``. Seller and admin outrank buyer."""
    if actor.is_admin:
        return OrderRole.ADMIN
    if order.sells(actor.id):
        return OrderRole.SELLER
    if actor.owns(order.buyer_id):
        return OrderRole.BUYER
    return OrderRole.OUTSIDER


def may_set_status(role: OrderRole, current: OrderStatus, target: OrderStatus) -> bool:
    if role in (OrderRole.ADMIN, OrderRole.SELLER):
        return True
    if role == OrderRole.BUYER:
        return (current, target) in _BUYER_TRANSITIONS
    return False


def authorize_status_change(actor, order, target: OrderStatus) -> OrderRole:
    role = role_on_order(actor, order)
    if not may_set_status(role, OrderStatus(order.status), target):
        raise Forbidden("Not authorized to update this order")
    return role


def may_view(actor, order) -> bool:
    return role_on_order(actor, order) != OrderRole.OUTSIDER
