"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, with no cross-user sharing.
State tracks ids returned by earlier steps so follow-up requests can
reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CheckoutState:
    """Tracks one customer's cart-to-payment journey."""

    session_id: str | None = None
    item_count: int = 0
    order_id: str | None = None
    transaction_id: str | None = None
    current_status: str = "pending"


@dataclass
class AdminState:
    """Tracks the orders an administrator has looked at."""

    seen_order_ids: list[str] = field(default_factory=list)
