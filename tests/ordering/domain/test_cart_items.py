"""Tests for cart item management."""

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from protean.exceptions import ValidationError


def _make_cart():
    return ShoppingCart.create(session_id="sess-001")


class TestCreateCart:
    def test_cart_is_keyed_by_session(self):
        cart = _make_cart()
        assert str(cart.id) == "sess-001"
        assert cart.is_empty

    def test_new_cart_has_timestamps(self):
        cart = _make_cart()
        assert cart.created_at is not None
        assert cart.updated_at is not None


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        cart.add_item("netflix", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_add_item_raises_event(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        added_events = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added_events) == 1
        event = added_events[0]
        assert event.product_id == "netflix"
        assert event.quantity == 1
        assert event.line_quantity == 1

    def test_add_same_product_increases_quantity(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart.add_item("netflix", 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_merge_event_carries_line_total(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart._events.clear()
        cart.add_item("netflix", 2)
        assert cart._events[0].quantity == 2
        assert cart._events[0].line_quantity == 3

    def test_add_different_product_creates_new_line(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart.add_item("spotify", 1)
        assert cart.lines() == {"netflix": 1, "spotify": 1}

    def test_unknown_product_is_accepted(self):
        cart = _make_cart()
        cart.add_item("not-in-any-catalog", 1)
        assert cart.lines() == {"not-in-any-catalog": 1}

    def test_zero_quantity_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.add_item("netflix", 0)


class TestSetQuantity:
    def test_set_quantity(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart.set_quantity("netflix", 5)
        assert cart.items[0].quantity == 5

    def test_set_quantity_raises_event(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart._events.clear()
        cart.set_quantity("netflix", 3)
        assert len(cart._events) == 1
        event = cart._events[0]
        assert isinstance(event, CartQuantityUpdated)
        assert event.previous_quantity == 1
        assert event.new_quantity == 3

    def test_set_quantity_below_one_rejected(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        with pytest.raises(ValidationError):
            cart.set_quantity("netflix", 0)

    def test_set_quantity_of_missing_product(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.set_quantity("netflix", 5)


class TestRemoveItem:
    def test_remove_item(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart.add_item("spotify", 1)
        cart.remove_item("netflix")
        assert cart.lines() == {"spotify": 1}

    def test_remove_item_raises_event(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart._events.clear()
        cart.remove_item("netflix")
        assert isinstance(cart._events[0], CartItemRemoved)

    def test_remove_missing_product(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            cart.remove_item("netflix")


class TestClear:
    def test_clear_empties_cart(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart.add_item("spotify", 2)
        cart.clear()
        assert cart.is_empty

    def test_clear_raises_event(self):
        cart = _make_cart()
        cart.add_item("netflix", 1)
        cart.add_item("spotify", 2)
        cart._events.clear()
        cart.clear()
        assert len(cart._events) == 1
        assert isinstance(cart._events[0], CartCleared)
        assert cart._events[0].removed_lines == 2

    def test_clearing_empty_cart_is_noop(self):
        cart = _make_cart()
        cart.clear()
        assert cart.is_empty
        assert not any(isinstance(e, CartCleared) for e in cart._events)
