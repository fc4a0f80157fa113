"""Runtime settings read from the environment."""

import os

ORDER_NUMBER_PREFIX = os.getenv("ORDER_NUMBER_PREFIX", "PCM")

# Attempts at allocating an unused order number before giving up
ORDER_NUMBER_ATTEMPTS = int(os.getenv("ORDER_NUMBER_ATTEMPTS", "5"))

# Seconds to wait for a product's stock lock during order placement
STOCK_LOCK_TIMEOUT = float(os.getenv("STOCK_LOCK_TIMEOUT", "10"))

ORDER_PLACED_MESSAGE = os.getenv(
    "ORDER_PLACED_MESSAGE",
    "Thank you for your order! Your order ({order_number}) has been placed and is being processed.",
)

# Overlay name, shared with the Protean config in domain.toml
ENVIRONMENT = os.getenv("PROTEAN_ENV", "development").lower()

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL")
