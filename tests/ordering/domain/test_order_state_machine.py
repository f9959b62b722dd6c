"""Tests for the order transition table."""

import pytest
from ordering.errors import InvalidTransitionError
from ordering.order.transitions import OrderStatus, allowed_targets, resolve_transition
from protean.exceptions import ValidationError

ALLOWED = [
    ("pending", "processing"),
    ("pending", "completed"),
    ("pending", "cancelled"),
    ("processing", "completed"),
    ("processing", "cancelled"),
    ("completed", "cancelled"),
    ("cancelled", "processing"),
]

FORBIDDEN = [
    ("processing", "pending"),
    ("completed", "pending"),
    ("completed", "processing"),
    ("cancelled", "pending"),
    ("cancelled", "completed"),
]


class TestResolveTransition:
    @pytest.mark.parametrize("current,requested", ALLOWED)
    def test_allowed_edges(self, current, requested):
        assert resolve_transition(current, requested) == OrderStatus(requested)

    @pytest.mark.parametrize("current,requested", FORBIDDEN)
    def test_forbidden_edges(self, current, requested):
        with pytest.raises(InvalidTransitionError) as exc:
            resolve_transition(current, requested)
        assert exc.value.current == current
        assert exc.value.requested == requested

    @pytest.mark.parametrize("status", list(OrderStatus))
    def test_same_status_is_noop(self, status):
        assert resolve_transition(status, status) == status

    def test_accepts_enum_members(self):
        assert resolve_transition(OrderStatus.PENDING, OrderStatus.COMPLETED) == OrderStatus.COMPLETED

    def test_unknown_status_rejected(self):
        with pytest.raises(InvalidTransitionError):
            resolve_transition("pending", "shipped")

    def test_invalid_transition_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc:
            resolve_transition("cancelled", "completed")
        assert exc.value.messages == {"status": ["Cannot transition from cancelled to completed"]}


class TestAllowedTargets:
    def test_nothing_returns_to_pending(self):
        for status in OrderStatus:
            assert OrderStatus.PENDING not in allowed_targets(status)

    def test_cancelled_can_only_reopen(self):
        assert allowed_targets(OrderStatus.CANCELLED) == {OrderStatus.PROCESSING}
