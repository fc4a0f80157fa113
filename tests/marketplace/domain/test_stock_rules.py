"""Tests for the size-keyed stock rules."""

from types import SimpleNamespace

import pytest
from marketplace.errors import InsufficientStock
from marketplace.product.stock import (
    StockDecision,
    StockRequest,
    StockRule,
    check_stock,
    derive_stock,
    plan_decrement,
)
from protean.exceptions import ValidationError


def _ledger(*pairs):
    return [SimpleNamespace(size=size, quantity=quantity) for size, quantity in pairs]


class TestStockRequest:
    def test_blank_size_means_no_size(self):
        assert StockRequest.of(1, "  ").size is None
        assert StockRequest.of(1, "").size is None

    def test_size_is_trimmed(self):
        assert StockRequest.of(2, " M ").size == "M"


class TestSizeRule:
    def test_exact_size_with_enough_stock(self):
        decision = check_stock("Tote", _ledger(("S", 2), ("M", 0)), 2, StockRequest.of(2, "S"))
        assert decision.rule == StockRule.SIZE
        assert decision.size == "S"
        assert decision.available == 2

    def test_size_with_zero_stock_rejected(self):
        with pytest.raises(InsufficientStock) as exc:
            check_stock("Tote", _ledger(("S", 2), ("M", 0)), 2, StockRequest.of(1, "M"))
        assert exc.value.messages == {"stock": ["Insufficient stock for Tote (Size: M)"]}

    def test_unknown_size_rejected(self):
        with pytest.raises(InsufficientStock) as exc:
            check_stock("Tote", _ledger(("S", 2)), 2, StockRequest.of(1, "XL"))
        assert exc.value.size == "XL"
        assert exc.value.available == 0

    def test_other_sizes_do_not_cover_the_request(self):
        with pytest.raises(InsufficientStock):
            check_stock("Tote", _ledger(("S", 1), ("M", 5)), 6, StockRequest.of(2, "S"))


class TestAggregateRule:
    def test_uses_live_sum_not_cached_total(self):
        # Cached total lags behind the ledger
        decision = check_stock("Scarf", _ledger(("S", 1), ("M", 2)), 0, StockRequest.of(3))
        assert decision.rule == StockRule.AGGREGATE
        assert decision.available == 3

    def test_live_sum_short_rejected_even_if_cached_total_is_high(self):
        with pytest.raises(InsufficientStock) as exc:
            check_stock("Scarf", _ledger(("S", 1), ("M", 0)), 10, StockRequest.of(2))
        assert exc.value.messages == {"stock": ["Insufficient stock for Scarf"]}


class TestUnsizedRule:
    def test_compares_against_total_stock(self):
        decision = check_stock("Mug", [], 5, StockRequest.of(3))
        assert decision.rule == StockRule.UNSIZED
        assert decision.available == 5

    def test_size_on_unsized_product_uses_total_stock(self):
        decision = check_stock("Mug", [], 5, StockRequest.of(1, "M"))
        assert decision.rule == StockRule.UNSIZED

    def test_short_total_rejected(self):
        with pytest.raises(InsufficientStock):
            check_stock("Mug", [], 2, StockRequest.of(3))


class TestQuantityValidation:
    @pytest.mark.parametrize("quantity", [0, -1, None])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError) as exc:
            check_stock("Mug", [], 5, StockRequest.of(quantity))
        assert "quantity" in exc.value.messages


class TestPlanDecrement:
    def test_size_decision_touches_only_that_entry(self):
        ledger = _ledger(("S", 2), ("M", 4))
        decision = check_stock("Tote", ledger, 6, StockRequest.of(1, "M"))
        assert plan_decrement("Tote", ledger, decision) == [("M", 3)]

    def test_aggregate_decision_draws_in_ledger_order(self):
        ledger = _ledger(("S", 1), ("M", 0), ("L", 3))
        decision = check_stock("Tote", ledger, 4, StockRequest.of(3))
        assert plan_decrement("Tote", ledger, decision) == [("S", 0), ("L", 1)]

    def test_unsized_decision_touches_no_entry(self):
        decision = check_stock("Mug", [], 5, StockRequest.of(3))
        assert plan_decrement("Mug", [], decision) == []

    def test_stale_decision_is_rejected_instead_of_going_negative(self):
        ledger = _ledger(("S", 1))
        stale = StockDecision(StockRule.SIZE, 2, "S", 2)
        with pytest.raises(InsufficientStock):
            plan_decrement("Tote", ledger, stale)

    def test_stale_aggregate_decision_is_rejected(self):
        ledger = _ledger(("S", 1), ("M", 1))
        stale = StockDecision(StockRule.AGGREGATE, 3, None, 3)
        with pytest.raises(InsufficientStock):
            plan_decrement("Tote", ledger, stale)


class TestDeriveStock:
    def test_sized_total_is_the_ledger_sum(self):
        assert derive_stock(_ledger(("S", 2), ("M", 3)), 99) == (5, True)

    def test_empty_sized_ledger_has_no_stock(self):
        assert derive_stock(_ledger(("S", 0), ("M", 0)), 7) == (0, False)

    def test_unsized_total_stands(self):
        assert derive_stock([], 4) == (4, True)
        assert derive_stock([], 0) == (0, False)
        assert derive_stock(None, None) == (0, False)

    def test_derivation_is_idempotent(self):
        ledger = _ledger(("S", 2), ("M", 1))
        total, _ = derive_stock(ledger, 0)
        assert derive_stock(ledger, total) == derive_stock(ledger, 0)
