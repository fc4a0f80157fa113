"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across
users. State tracks ids returned by creation endpoints so follow-up
operations can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class SellerState:
    """Tracks a simulated seller and the products they have listed."""

    seller_id: str | None = None
    product_ids: list[str] = field(default_factory=list)


@dataclass
class BuyerState:
    """Tracks a simulated buyer's checkout through delivery and review."""

    buyer_id: str | None = None
    seller_id: str | None = None
    product_id: str | None = None
    size: str | None = None
    order_id: str | None = None
    current_status: str = "order placed"
