"""Marketplace API package."""

from marketplace.api.errors import register_marketplace_exception_handlers
from marketplace.api.routes import (
    admin_router,
    cart_router,
    message_router,
    order_router,
    product_router,
    review_router,
    seller_router,
)

routers = [product_router, seller_router, admin_router, cart_router, order_router, review_router, message_router]

__all__ = [
    "admin_router",
    "cart_router",
    "message_router",
    "order_router",
    "product_router",
    "register_marketplace_exception_handlers",
    "review_router",
    "routers",
    "seller_router",
]
