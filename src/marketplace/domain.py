"""Marketplace bounded context: catalog, carts, orders, messaging and reviews.

Handles seller-owned product listings with per-size stock, buyer carts, order placement
with inventory decrement, order status tracking, buyer-seller messaging and
product reviews.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
marketplace = Domain(name="marketplace")
