"""Product edits and restocking: commands and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import Forbidden
from marketplace.product.creation import _load_json
from marketplace.product.product import Product
from marketplace.shared.actor import Actor

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class UpdateProduct:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    product_id: Identifier(required=True)
    name: String(max_length=255)
    description: Text()
    price: Float(min_value=0.0)
    original_price: Float(min_value=0.0)
    discount: Float()
    category_id: Identifier()
    images: Text()
    size_stock: Text()
    total_stock: Integer(min_value=0)
    variations: Text()
    is_featured: Boolean()
    is_flash_sale: Boolean()


@marketplace.command(part_of="Product")
class RestockSize:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    product_id: Identifier(required=True)
    size: String(required=True, max_length=20)
    quantity: Integer(required=True, min_value=0)


@marketplace.command_handler(part_of=Product)
class ManageProductDetailsHandler:
    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        actor = Actor(command.actor_id, command.actor_role)
        if not actor.may_manage(product.seller_id):
            raise Forbidden("Only the product's seller can edit it")

        product.update(
            name=command.name,
            description=command.description,
            price=command.price,
            original_price=command.original_price,
            discount=command.discount,
            category_id=command.category_id,
            images=_load_json(command.images),
            size_stock=_load_json(command.size_stock),
            total_stock=command.total_stock,
            variations=_load_json(command.variations),
            # Promotion flags are an admin concern
            is_featured=command.is_featured if actor.is_admin else None,
            is_flash_sale=command.is_flash_sale if actor.is_admin else None,
        )
        repo.add(product)

    @handle(RestockSize)
    def restock_size(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        actor = Actor(command.actor_id, command.actor_role)
        if not actor.may_manage(product.seller_id):
            raise Forbidden("Only the product's seller can restock it")

        product.restock(command.size, command.quantity)
        repo.add(product)

        logger.info(
            "Product restocked",
            product_id=str(product.id),
            size=command.size,
            quantity=command.quantity,
            total_stock=product.total_stock,
        )
