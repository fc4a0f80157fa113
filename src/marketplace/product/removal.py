"""Product withdrawal and deletion: commands and handler.

Withdrawal is the normal path: the product is taken off sale and stays
readable for the orders that reference it. Hard deletion is reserved for
administrators.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import Forbidden
from marketplace.product.product import Product
from marketplace.shared.actor import Actor

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class WithdrawProduct:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    product_id: Identifier(required=True)


@marketplace.command(part_of="Product")
class DeleteProduct:
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)
    product_id: Identifier(required=True)


@marketplace.command_handler(part_of=Product)
class RemoveProductHandler:
    @handle(WithdrawProduct)
    def withdraw_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        actor = Actor(command.actor_id, command.actor_role)
        if not actor.may_manage(product.seller_id):
            raise Forbidden("Only the product's seller can remove it")

        product.withdraw(actor.id)
        repo.add(product)
        logger.info("Product withdrawn", product_id=str(product.id), actor_id=actor.id)

    @handle(DeleteProduct)
    def delete_product(self, command):
        actor = Actor(command.actor_id, command.actor_role)
        if not actor.is_admin:
            raise Forbidden("Only administrators can delete products")

        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)
        logger.warning("Product deleted", product_id=str(command.product_id), actor_id=actor.id)
