"""Order number allocation."""

import secrets
import time

from marketplace.utils import settings


def next_order_number(prefix=None):
    """``PCM`` + millisecond timestamp + 6 random hex digits."""
    prefix = settings.ORDER_NUMBER_PREFIX if prefix is None else prefix
    return f"{prefix}{int(time.time() * 1000)}{secrets.token_hex(3).upper()}"


def allocate_order_number(is_taken, attempts=None):
    """Draw order numbers until ``is_taken`` reports a free one.

    Returns ``None`` when every attempt collided; the caller decides how to
    fail.
    """
    attempts = settings.ORDER_NUMBER_ATTEMPTS if attempts is None else attempts
    for _ in range(attempts):
        candidate = next_order_number()
        if not is_taken(candidate):
            return candidate
    return None
