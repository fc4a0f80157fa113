"""Admin moderation of listings: commands and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import Forbidden
from marketplace.product.product import Product
from marketplace.shared.actor import Actor


@marketplace.command(part_of="Product")
class ModerateProduct:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    product_id: Identifier(required=True)
    status: String(required=True, max_length=20)
    reason: Text()


@marketplace.command(part_of="Product")
class ToggleProductAvailability:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    product_id: Identifier(required=True)


@marketplace.command(part_of="Product")
class SetProductPromotion:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    product_id: Identifier(required=True)
    is_featured: Boolean()
    is_flash_sale: Boolean()
    discount: Float()


def _require_admin(command):
    actor = Actor(command.actor_id, command.actor_role)
    if not actor.is_admin:
        raise Forbidden("Admin access required")
    return actor


@marketplace.command_handler(part_of=Product)
class ModerateProductHandler:
    @handle(ModerateProduct)
    def moderate_product(self, command):
        actor = _require_admin(command)
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.moderate(command.status, actor.id, reason=command.reason)
        repo.add(product)

    @handle(ToggleProductAvailability)
    def toggle_availability(self, command):
        _require_admin(command)
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.toggle_availability()
        repo.add(product)
        return product.is_available

    @handle(SetProductPromotion)
    def set_promotion(self, command):
        _require_admin(command)
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.set_promotion(
            is_featured=command.is_featured,
            is_flash_sale=command.is_flash_sale,
            discount=command.discount,
        )
        repo.add(product)
