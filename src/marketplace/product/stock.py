"""Inventory rules for size-keyed product stock.

Pure functions over a product's stock ledger. They never write anything:
``check_stock`` decides whether a request can be served and which rule
applies, ``plan_decrement`` turns an accepted decision into the exact new
quantities, and ``derive_stock`` recomputes the derived totals.

Rules:
    SIZE       sized product, size requested: exact match on one entry
    AGGREGATE  sized product, no size requested: live sum of all entries
    UNSIZED    product without a size ledger: compare against total_stock
"""

from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ValidationError

from marketplace.errors import InsufficientStock


class Size(Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"
    ONE_SIZE = "One Size"


class StockRule(Enum):
    SIZE = "size"
    AGGREGATE = "aggregate"
    UNSIZED = "unsized"


@dataclass(frozen=True)
class StockRequest:
    quantity: int
    size: str | None = None

    @classmethod
    def of(cls, quantity, size=None):
        """Build a request, treating a blank size as no size at all."""
        size = size.strip() if isinstance(size, str) else size
        return cls(quantity=quantity, size=size or None)


@dataclass(frozen=True)
class StockDecision:
    rule: StockRule
    quantity: int
    size: str | None
    available: int


def live_total(size_stock) -> int:
    return sum(entry.quantity or 0 for entry in size_stock)


def check_stock(product_name, size_stock, total_stock, request: StockRequest) -> StockDecision:
    """Decide whether ``request`` can be served from the given stock ledger.

    Raises ``InsufficientStock`` naming the product (and size) otherwise.
    The aggregate check sums the ledger itself instead of trusting the cached
    ``total_stock``, which may lag behind decrements made earlier in the
    same order.
    """
    if request.quantity is None or request.quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})

    size_stock = list(size_stock or [])

    if size_stock and request.size:
        entry = next((e for e in size_stock if e.size == request.size), None)
        available = entry.quantity if entry is not None else 0
        if entry is None or available < request.quantity:
            raise InsufficientStock(product_name, size=request.size, available=available, requested=request.quantity)
        return StockDecision(StockRule.SIZE, request.quantity, request.size, available)

    if size_stock:
        available = live_total(size_stock)
        rule = StockRule.AGGREGATE
    else:
        available = total_stock or 0
        rule = StockRule.UNSIZED

    if available < request.quantity:
        raise InsufficientStock(product_name, available=available, requested=request.quantity)
    return StockDecision(rule, request.quantity, None, available)


def plan_decrement(product_name, size_stock, decision: StockDecision) -> list[tuple[str, int]]:
    """Return ``(size, new_quantity)`` for every ledger entry the decision consumes.

    An aggregate decision draws from entries in ledger order. Unsized
    decisions touch no entry. A plan that would leave any entry negative is
    rejected here, before anything is written.
    """
    size_stock = list(size_stock or [])
    changes = []

    if decision.rule == StockRule.SIZE:
        entry = next((e for e in size_stock if e.size == decision.size), None)
        remaining = (entry.quantity if entry is not None else 0) - decision.quantity
        if entry is None or remaining < 0:
            raise InsufficientStock(product_name, size=decision.size, requested=decision.quantity)
        changes.append((entry.size, remaining))

    elif decision.rule == StockRule.AGGREGATE:
        outstanding = decision.quantity
        for entry in size_stock:
            if outstanding == 0:
                break
            taken = min(entry.quantity or 0, outstanding)
            if taken:
                changes.append((entry.size, entry.quantity - taken))
                outstanding -= taken
        if outstanding:
            raise InsufficientStock(product_name, available=live_total(size_stock), requested=decision.quantity)

    return changes


def derive_stock(size_stock, total_stock) -> tuple[int, bool]:
    """Recompute ``(total_stock, has_stock)``.

    With a size ledger the total is always the sum of its entries; without
    one the stored total stands.
    """
    size_stock = list(size_stock or [])
    total = live_total(size_stock) if size_stock else (total_stock or 0)
    return total, total > 0
