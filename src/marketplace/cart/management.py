"""Whole-cart operations: clearing and syncing a client-held copy."""

import json

import structlog
from protean import handle
from protean.exceptions import ProteanException
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.items import available_product
from marketplace.domain import marketplace
from marketplace.product.stock import Size

logger = structlog.get_logger(__name__)

_SIZES = {size.value for size in Size}


@marketplace.command(part_of="Cart")
class ClearCart:
    buyer_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class SyncCart:
    """Replace the buyer's cart with the lines a client kept locally."""

    buyer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{product_id, quantity, size?, variation_name?, variation_value?}]


def _synced_line(item):
    """A cart line priced from the product, or None when it cannot be kept."""
    quantity = item.get("quantity")
    if not isinstance(quantity, int) or quantity < 1:
        return None
    try:
        product = available_product(item.get("product_id"))
    except ProteanException:
        return None

    size = (item.get("size") or "").strip()
    images = product.image_list()
    return {
        "product_id": str(product.id),
        "seller_id": str(product.seller_id),
        "name": product.name,
        "quantity": quantity,
        "price": product.price,
        "size": size if size in _SIZES else None,
        "variation_name": item.get("variation_name"),
        "variation_value": item.get("variation_value"),
        "image": images[0] if images else None,
    }


@marketplace.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_buyer(command.buyer_id)
        if cart is None:
            return
        cart.clear()
        repo.add(cart)

    @handle(SyncCart)
    def sync_cart(self, command):
        requested = json.loads(command.items) if isinstance(command.items, str) else command.items
        lines = [line for line in map(_synced_line, requested or []) if line]

        repo = current_domain.repository_for(Cart)
        cart = repo.open_for(command.buyer_id)
        cart.replace_items(lines, dropped=len(requested or []) - len(lines))
        repo.add(cart)

        if len(lines) < len(requested or []):
            logger.info(
                "Cart synced with unavailable lines dropped",
                buyer_id=str(command.buyer_id),
                kept=len(lines),
                dropped=len(requested) - len(lines),
            )
        return str(cart.id)
