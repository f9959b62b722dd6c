"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.admin.controller import AdminOrderController
from ordering.order.ledger import get_ledger
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def context():
    """What the When steps produced: order id, checkout result, outcome."""
    return {"order_id": None}


@pytest.fixture()
def admin():
    return AdminOrderController()


# ---------------------------------------------------------------------------
# Given steps: orders already in the ledger
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a "{status}" order'))
def order_in_status(placed_order, context, status):
    order_id = placed_order()
    if status != "pending":
        get_ledger().transition(order_id, status)
    context["order_id"] = order_id


# ---------------------------------------------------------------------------
# Then steps: orders (shared)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(context, status):
    assert get_ledger().get(context["order_id"]).status == status


@then("the transition is refused")
def transition_refused(error):
    assert error["exc"] is not None, "Expected the transition to be refused"
    assert isinstance(error["exc"], ValidationError)


@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
