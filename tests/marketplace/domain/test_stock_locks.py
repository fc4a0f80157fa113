"""Tests for per-product stock locks."""

import threading

import pytest
from marketplace.errors import StockConflict
from marketplace.order.locks import StockLocks


class TestStockLocks:
    def test_locks_are_released_after_the_block(self):
        locks = StockLocks(timeout=0.1)
        with locks.holding(["prod-1", "prod-2"]):
            pass
        with locks.holding(["prod-2", "prod-1"]):
            pass

    def test_locks_are_released_on_error(self):
        locks = StockLocks(timeout=0.1)
        with pytest.raises(RuntimeError):
            with locks.holding(["prod-1"]):
                raise RuntimeError("boom")
        with locks.holding(["prod-1"]):
            pass

    def test_duplicate_ids_are_locked_once(self):
        locks = StockLocks(timeout=0.1)
        with locks.holding(["prod-1", "prod-1"]):
            pass

    def test_busy_product_raises_conflict(self):
        locks = StockLocks(timeout=0.05)
        held = threading.Event()
        release = threading.Event()

        def hold():
            with locks.holding(["prod-1"]):
                held.set()
                release.wait(1)

        worker = threading.Thread(target=hold)
        worker.start()
        held.wait(1)
        try:
            with pytest.raises(StockConflict):
                with locks.holding(["prod-1"]):
                    pass
        finally:
            release.set()
            worker.join()
