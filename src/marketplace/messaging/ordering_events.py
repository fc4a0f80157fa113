"""Messaging reacts to Order events.

When an order is placed each distinct seller on it sends the buyer an
automated acknowledgement. Sending is best effort: a failure for one seller
is logged and the rest are still sent. Order placement never fails because
of it.
"""

import json

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.messaging.message import Message
from marketplace.order.events import OrderPlaced
from marketplace.utils import settings

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Message, stream_category="marketplace::order")
class OrderMessagingEventHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        body = settings.ORDER_PLACED_MESSAGE.format(order_number=event.order_number)

        for seller_id in json.loads(event.seller_ids):
            try:
                message = Message.send(seller_id, event.buyer_id, body, is_automated=True)
                current_domain.repository_for(Message).add(message)
            except Exception as exc:
                logger.error(
                    "Automated order message failed",
                    order_id=str(event.order_id),
                    seller_id=seller_id,
                    error=str(exc),
                )
            else:
                logger.info(
                    "Automated order message sent",
                    order_id=str(event.order_id),
                    seller_id=seller_id,
                )
