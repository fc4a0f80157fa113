"""Product listing: command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import Forbidden
from marketplace.product.product import Product
from marketplace.shared.actor import Actor

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class CreateProduct:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    seller_id: Identifier()
    name: String(required=True, max_length=255)
    description: Text(required=True)
    price: Float(required=True, min_value=0.0)
    original_price: Float(min_value=0.0)
    discount: Float(default=0.0)
    category_id: Identifier()
    images: Text()  # JSON: list of image references
    size_stock: Text()  # JSON: [{"size": "M", "quantity": 3}, ...]
    total_stock: Integer(default=0, min_value=0)
    variations: Text()  # JSON: list of variation dicts
    is_featured: Boolean(default=False)
    is_flash_sale: Boolean(default=False)


def _load_json(value, default=None):
    if value is None:
        return default
    return json.loads(value) if isinstance(value, str) else value


@marketplace.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        actor = Actor(command.actor_id, command.actor_role)
        if not (actor.is_seller or actor.is_admin):
            raise Forbidden("Only sellers can list products")

        # Admins may list on behalf of a seller
        seller_id = command.seller_id if actor.is_admin and command.seller_id else actor.id

        product = Product.create(
            seller_id=seller_id,
            name=command.name,
            description=command.description,
            price=command.price,
            original_price=command.original_price,
            discount=command.discount,
            category_id=command.category_id,
            images=_load_json(command.images, []),
            size_stock=_load_json(command.size_stock, []),
            total_stock=command.total_stock or 0,
            variations=_load_json(command.variations, []),
            is_featured=command.is_featured,
            is_flash_sale=command.is_flash_sale,
        )
        current_domain.repository_for(Product).add(product)

        logger.info(
            "Product listed",
            product_id=str(product.id),
            seller_id=str(seller_id),
            total_stock=product.total_stock,
        )
        return str(product.id)
