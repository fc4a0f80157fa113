"""Per-product locks held across an order's check → decrement → commit.

Within one process no two orders touching the same product can interleave
between reading stock and committing the decrement. Locks are taken in
sorted product-id order so that two orders sharing products never wait on
each other in a cycle.
"""

import threading
from collections import defaultdict
from contextlib import ExitStack, contextmanager

import structlog

from marketplace.errors import StockConflict
from marketplace.utils import settings

logger = structlog.get_logger(__name__)


class StockLocks:
    def __init__(self, timeout=None):
        self.timeout = settings.STOCK_LOCK_TIMEOUT if timeout is None else timeout
        self._guard = threading.Lock()
        self._locks = defaultdict(threading.Lock)

    def _lock_for(self, product_id):
        with self._guard:
            return self._locks[str(product_id)]

    @contextmanager
    def holding(self, product_ids):
        """Hold the lock of every product in ``product_ids`` for the block's duration.

        Raises ``StockConflict`` if a lock cannot be taken within the timeout;
        locks already taken are released.
        """
        with ExitStack() as stack:
            for product_id in sorted({str(pid) for pid in product_ids}):
                lock = self._lock_for(product_id)
                if not lock.acquire(timeout=self.timeout):
                    logger.warning("Timed out waiting for stock lock", product_id=product_id, timeout=self.timeout)
                    raise StockConflict(f"Product {product_id} is busy, please retry")
                stack.callback(lock.release)
            yield


stock_locks = StockLocks()
