"""Order status updates: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.access import authorize_status_change
from marketplace.order.order import Order, OrderStatus
from marketplace.shared.actor import Actor

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id: Identifier(required=True)
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    status: String(required=True, max_length=50)
    note: Text()


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)

        target = OrderStatus.parse(command.status)
        actor = Actor(command.actor_id, command.actor_role)
        role = authorize_status_change(actor, order, target)

        previous = order.status
        order.change_status(target, actor.id, note=command.note)
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous,
            status=order.status,
            actor_id=actor.id,
            role=role.value,
        )
