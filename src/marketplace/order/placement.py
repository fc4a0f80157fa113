"""Order placement: command, handler and the locked entry point.

Every line is checked and its stock taken in memory first. Only when all
lines pass are the touched products and then the order added to their
repositories, inside the handler's single unit of work, so a rejected
line leaves neither stock nor an order behind.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import EmptyOrder, MissingSeller, ProductUnavailable, StockConflict
from marketplace.order.locks import stock_locks
from marketplace.order.numbering import allocate_order_number
from marketplace.order.order import Order
from marketplace.product.product import Product

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class PlaceOrder:
    buyer_id: Identifier(required=True)
    items: Text(required=True)  # JSON: [{product_id, quantity, size?, price?, seller_id?, ...}]
    shipping_address: Text()  # JSON: address dict
    payment_method: String(max_length=20)


def _load_json(value, default=None):
    if value is None:
        return default
    return json.loads(value) if isinstance(value, str) else value


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        requested = _load_json(command.items, [])
        if not requested:
            raise EmptyOrder()

        product_repo = current_domain.repository_for(Product)
        order_repo = current_domain.repository_for(Order)

        # Products are loaded once so later lines see earlier lines' decrements
        products = {}
        lines = []
        for item in requested:
            product = self._product_for(product_repo, products, item)

            seller_id = item.get("seller_id") or product.seller_id
            if not seller_id:
                raise MissingSeller(item.get("name") or product.name)

            decision = product.sell(item.get("quantity"), item.get("size"))

            images = product.image_list()
            lines.append(
                {
                    "product_id": str(product.id),
                    "seller_id": str(seller_id),
                    "name": item.get("name") or product.name,
                    "quantity": decision.quantity,
                    "price": item["price"] if item.get("price") is not None else product.price,
                    "size": decision.size,
                    "variation_name": item.get("variation_name"),
                    "variation_value": item.get("variation_value"),
                    "image": item.get("image") or (images[0] if images else None),
                }
            )

        order_number = allocate_order_number(order_repo.number_taken)
        if order_number is None:
            raise StockConflict("Could not allocate an order number, please retry")

        order = Order.place(
            order_number=order_number,
            buyer_id=command.buyer_id,
            lines=lines,
            shipping_address=_load_json(command.shipping_address),
            payment_method=command.payment_method,
        )

        for product in products.values():
            product_repo.add(product)
        order_repo.add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            buyer_id=str(command.buyer_id),
            line_count=len(lines),
            total_amount=order.total_amount,
        )
        return str(order.id)

    def _product_for(self, repo, products, item):
        product_id = item.get("product_id")
        key = str(product_id)
        if key in products:
            return products[key]

        try:
            product = repo.get(product_id) if product_id else None
        except ObjectNotFoundError:
            product = None
        if product is None or not product.is_available:
            raise ProductUnavailable(item.get("name") or (product.name if product else "Unknown"))

        products[key] = product
        return product


def place_order(buyer_id, items, shipping_address=None, payment_method=None):
    """Place an order while holding the stock locks of every product it names.

    Returns the persisted ``Order``.
    """
    if not items:
        raise EmptyOrder()

    product_ids = [item.get("product_id") for item in items if item.get("product_id")]
    with stock_locks.holding(product_ids):
        order_id = current_domain.process(
            PlaceOrder(
                buyer_id=buyer_id,
                items=json.dumps(items),
                shipping_address=json.dumps(shipping_address) if shipping_address else None,
                payment_method=payment_method,
            ),
            asynchronous=False,
        )
    return current_domain.repository_for(Order).get(order_id)
