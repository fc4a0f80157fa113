"""Seller orders: which orders carry lines from which seller."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import OrderPlaced, OrderStatusUpdated
from marketplace.order.order import Order


@marketplace.projection
class SellerOrders:
    entry_id: Identifier(identifier=True, required=True)  # "<order_id>:<seller_id>"
    seller_id: Identifier(required=True)
    order_id: Identifier(required=True)
    order_number: String()
    buyer_id: Identifier()
    status: String(required=True)
    placed_at: DateTime()
    updated_at: DateTime()


def _entry_id(order_id, seller_id):
    return f"{order_id}:{seller_id}"


@marketplace.projector(projector_for=SellerOrders, aggregates=[Order])
class SellerOrdersProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        repo = current_domain.repository_for(SellerOrders)
        for seller_id in json.loads(event.seller_ids):
            repo.add(
                SellerOrders(
                    entry_id=_entry_id(event.order_id, seller_id),
                    seller_id=seller_id,
                    order_id=event.order_id,
                    order_number=event.order_number,
                    buyer_id=event.buyer_id,
                    status=event.status,
                    placed_at=event.placed_at,
                    updated_at=event.placed_at,
                )
            )

    @on(OrderStatusUpdated)
    def on_order_status_updated(self, event):
        repo = current_domain.repository_for(SellerOrders)
        for seller_id in json.loads(event.seller_ids):
            entry = repo.get(_entry_id(event.order_id, seller_id))
            entry.status = event.status
            entry.updated_at = event.changed_at
            repo.add(entry)
