"""The single order transition function.

Every status change in the system, whether it comes from payment
reconciliation, the admin dashboard or the pending-order reaper, is decided
here against one table.

    pending    → processing | completed | cancelled
    processing → completed | cancelled
    completed  → cancelled            (post-hoc refund / void)
    cancelled  → processing           (reopen)

Nothing ever returns to pending, and a cancelled order must be reopened
(processing) before it can complete.
"""

from enum import Enum

from ordering.errors import InvalidTransitionError


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: {OrderStatus.PROCESSING},
}


def allowed_targets(current: OrderStatus) -> set[OrderStatus]:
    return set(_VALID_TRANSITIONS.get(current, set()))


def resolve_transition(current, requested) -> OrderStatus:
    """Return the status an order ends up in when ``requested`` is applied.

    Accepts enum members or their string values. Requesting the current
    status is a successful no-op; an edge missing from the table raises
    ``InvalidTransitionError``.
    """
    try:
        current = OrderStatus(current)
        requested = OrderStatus(requested)
    except ValueError as exc:
        raise InvalidTransitionError(str(getattr(current, "value", current)), str(requested)) from exc

    if requested == current:
        return current
    if requested not in _VALID_TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, requested.value)
    return requested
