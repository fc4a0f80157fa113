"""Cart line management: commands and handler.

Adding or resizing a line checks the product's current stock with the same
rules placement uses, so a cart never holds more than could be bought at
that moment.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.domain import marketplace
from marketplace.errors import NotFound, ProductUnavailable
from marketplace.product.product import Product

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Cart")
class AddToCart:
    buyer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)
    variation_name = String(max_length=100)
    variation_value = String(max_length=100)
    price = Float(min_value=0.0)


@marketplace.command(part_of="Cart")
class UpdateCartQuantity:
    buyer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    buyer_id = Identifier(required=True)
    item_id = Identifier(required=True)


def available_product(product_id) -> Product:
    """Load a product that is on sale, or raise ``ProductUnavailable``."""
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise ProductUnavailable("Unknown") from None
    if not product.is_available:
        raise ProductUnavailable(product.name)
    return product


def _existing_cart(buyer_id) -> Cart:
    cart = current_domain.repository_for(Cart).for_buyer(buyer_id)
    if cart is None:
        raise NotFound("Cart", buyer_id)
    return cart


@marketplace.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = available_product(command.product_id)
        decision = product.check_supply(command.quantity, command.size)

        repo = current_domain.repository_for(Cart)
        cart = repo.open_for(command.buyer_id)

        existing = cart.existing_line(
            product.id, decision.size, command.variation_name, command.variation_value
        )
        if existing:
            # The grown line must still be coverable
            product.check_supply(existing.quantity + command.quantity, decision.size)

        images = product.image_list()
        item_id = cart.add_item(
            product_id=str(product.id),
            quantity=command.quantity,
            size=decision.size,
            variation_name=command.variation_name,
            variation_value=command.variation_value,
            seller_id=str(product.seller_id),
            name=product.name,
            price=command.price if command.price is not None else product.price,
            image=images[0] if images else None,
        )
        repo.add(cart)

        logger.info(
            "Added to cart",
            buyer_id=str(command.buyer_id),
            product_id=str(product.id),
            quantity=command.quantity,
        )
        return item_id

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = _existing_cart(command.buyer_id)
        item = cart.line(command.item_id)

        available_product(item.product_id).check_supply(command.quantity, item.size)

        cart.update_item_quantity(command.item_id, command.quantity)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _existing_cart(command.buyer_id)
        cart.remove_item(command.item_id)
        current_domain.repository_for(Cart).add(cart)
