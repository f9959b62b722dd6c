"""Application tests for the order ledger."""

import threading
import time
from datetime import UTC, datetime, timedelta

import pytest
from ordering.domain import ordering
from ordering.errors import InvalidTransitionError, LedgerStorageError
from ordering.order.ledger import OrderLedger, get_ledger
from ordering.order.order import Order
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

PAYMENT = {
    "transaction_id": "txn-001",
    "payment_method": "bkash",
    "paid_amount": 20.0,
    "currency": "USD",
}


@pytest.fixture
def ledger():
    return get_ledger()


class TestPlace:
    def test_place_persists_pending_order(self, ledger, make_draft):
        draft = make_draft(lines={"netflix": 2}, currency="BDT")
        order_id = ledger.place(draft)

        assert order_id == draft.order_id
        order = ledger.get(order_id)
        assert order.status == "pending"
        assert order.currency == "BDT"
        assert order.totals.total == 2200.0
        assert order.items[0].unit_price == 1100.0

    def test_reload_matches_draft(self, ledger, make_draft):
        draft = make_draft(lines={"netflix": 1, "spotify": 2}, currency="USD")
        order = ledger.get(ledger.place(draft))

        assert order.customer.name == draft.customer_name
        assert order.customer.email == draft.customer_email
        assert order.totals.subtotal == float(draft.subtotal)
        assert order.totals.total == float(draft.total)
        assert {item.product_id: item.quantity for item in order.items} == {"netflix": 1, "spotify": 2}

    def test_duplicate_order_number_rejected(self, ledger, make_draft):
        draft = make_draft()
        ledger.place(draft)
        with pytest.raises(ValidationError):
            ledger.place(draft)

    def test_exists(self, ledger, placed_order):
        order_id = placed_order()
        assert ledger.exists(order_id)
        assert not ledger.exists("ORD-99999999")


class TestDiscard:
    def test_discard_removes_pending_order(self, ledger, placed_order):
        order_id = placed_order()
        ledger.discard(order_id, reason="gateway down")
        assert not ledger.exists(order_id)

    def test_only_pending_orders_can_be_discarded(self, ledger, placed_order):
        order_id = placed_order()
        ledger.transition(order_id, "processing")
        with pytest.raises(ValidationError):
            ledger.discard(order_id)
        assert ledger.exists(order_id)


class TestTransition:
    def test_transition_persists(self, ledger, placed_order):
        order_id = placed_order()
        order = ledger.transition(order_id, "cancelled")
        assert order.status == "cancelled"
        assert ledger.get(order_id).status == "cancelled"

    def test_completion_with_payment_details(self, ledger, placed_order):
        order_id = placed_order()
        order = ledger.transition(order_id, "completed", payment_details=PAYMENT)
        assert order.payment_details.transaction_id == "txn-001"

    def test_repeated_completion_keeps_first_payment(self, ledger, placed_order):
        order_id = placed_order()
        ledger.transition(order_id, "completed", payment_details=PAYMENT)
        order = ledger.transition(order_id, "completed", payment_details={**PAYMENT, "transaction_id": "txn-002"})
        assert order.status == "completed"
        assert order.payment_details.transaction_id == "txn-001"

    def test_invalid_transition_not_persisted(self, ledger, placed_order):
        order_id = placed_order()
        ledger.transition(order_id, "cancelled")
        with pytest.raises(InvalidTransitionError):
            ledger.transition(order_id, "completed")
        assert ledger.get(order_id).status == "cancelled"

    def test_unknown_status_rejected(self, ledger, placed_order):
        order_id = placed_order()
        with pytest.raises(ValidationError):
            ledger.transition(order_id, "shipped")

    def test_unknown_order(self, ledger):
        with pytest.raises(ObjectNotFoundError):
            ledger.transition("ORD-99999999", "completed")


class TestAmend:
    def test_amend_status_and_notes(self, ledger, placed_order):
        order_id = placed_order()
        order = ledger.amend(order_id, status="processing", notes="on it")
        assert (order.status, order.notes) == ("processing", "on it")

    def test_blank_values_keep_current(self, ledger, placed_order):
        order_id = placed_order()
        ledger.amend(order_id, notes="first")
        order = ledger.amend(order_id, status="", notes="")
        assert (order.status, order.notes) == ("pending", "first")

    def test_expected_status_guard(self, ledger, placed_order):
        order_id = placed_order()
        ledger.transition(order_id, "completed")
        with pytest.raises(ValidationError):
            ledger.amend(order_id, status="cancelled", expected_status="pending")
        assert ledger.get(order_id).status == "completed"


class TestSearch:
    def test_newest_first(self, ledger, placed_order):
        first = placed_order()
        second = placed_order()
        assert [str(o.id) for o in ledger.search()] == [second, first]

    def test_status_filter(self, ledger, placed_order):
        keep = placed_order()
        other = placed_order()
        ledger.transition(other, "cancelled")
        assert [str(o.id) for o in ledger.search(status="pending")] == [keep]

    def test_query_matches_number_name_and_email(self, ledger, placed_order, customer):
        from ordering.checkout.assembler import CustomerDetails

        nadia = placed_order()
        karim = placed_order(
            who=CustomerDetails(first_name="Karim", last_name="Hossain", email="karim@shop.test", phone="017")
        )

        assert [str(o.id) for o in ledger.search(query="KARIM")] == [karim]
        assert [str(o.id) for o in ledger.search(query="shop.test")] == [karim]
        assert [str(o.id) for o in ledger.search(query=nadia.lower())] == [nadia]

    def test_unknown_status_filter_rejected(self, ledger):
        with pytest.raises(ValidationError):
            ledger.search(status="shipped")


class TestPendingSince:
    def test_only_old_pending_orders(self, ledger, placed_order):
        old = placed_order()
        done = placed_order()
        ledger.transition(done, "completed")

        future = datetime.now(UTC) + timedelta(hours=1)
        past = datetime.now(UTC) - timedelta(hours=1)

        assert [str(o.id) for o in ledger.pending_since(future)] == [old]
        assert ledger.pending_since(past) == []


class TestStorageFailure:
    def test_unexpected_errors_become_ledger_storage_errors(self, make_draft, monkeypatch):
        ledger = OrderLedger()

        def broken_process(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(ordering, "process", broken_process)
        with pytest.raises(LedgerStorageError):
            ledger.place(make_draft())

    def test_nothing_persisted_on_failure(self, make_draft, monkeypatch):
        ledger = OrderLedger()
        draft = make_draft()
        repo = current_domain.repository_for(Order)

        def broken_add(*args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(type(repo), "add", broken_add)
        with pytest.raises(LedgerStorageError):
            ledger.place(draft)
        monkeypatch.undo()

        assert not ledger.exists(draft.order_id)


class TestConcurrentWrites:
    """Writers on one order, each in its own thread and domain context."""

    @pytest.fixture
    def slow_status_change(self, monkeypatch):
        """Hold the first status change open until a rival writer has started."""
        entered = threading.Event()
        original = Order.apply_status

        def slow_apply_status(order, *args, **kwargs):
            if not entered.is_set():
                entered.set()
                time.sleep(0.2)
            return original(order, *args, **kwargs)

        monkeypatch.setattr(Order, "apply_status", slow_apply_status)
        return entered

    def _race(self, first, second, entered):
        errors = []

        def run(write):
            try:
                with ordering.domain_context():
                    write()
            except Exception as exc:  # surfaced through ``errors``
                errors.append(exc)

        threads = [threading.Thread(target=run, args=(first,))]
        threads[0].start()
        assert entered.wait(timeout=5)
        threads.append(threading.Thread(target=run, args=(second,)))
        threads[1].start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []

    def test_status_change_and_notes_edit_both_survive(self, ledger, placed_order, slow_status_change):
        order_id = placed_order()

        self._race(
            lambda: get_ledger().transition(order_id, "cancelled"),
            lambda: get_ledger().amend(order_id, notes="customer called"),
            slow_status_change,
        )

        order = ledger.get(order_id)
        assert order.status == "cancelled"
        assert order.notes == "customer called"

    def test_admin_confirm_and_reconciliation_keep_one_payment(self, ledger, placed_order, slow_status_change):
        order_id = placed_order()

        self._race(
            lambda: get_ledger().transition(order_id, "completed", reason="admin confirm"),
            lambda: get_ledger().transition(order_id, "completed", payment_details=PAYMENT),
            slow_status_change,
        )

        order = ledger.get(order_id)
        assert order.status == "completed"
        assert order.payment_details.transaction_id == "txn-001"
        assert order.to_record()["paymentDetails"]["transactionId"] == "txn-001"

    def test_two_reconciliations_record_the_first_payment(self, ledger, placed_order, slow_status_change):
        order_id = placed_order()

        self._race(
            lambda: get_ledger().transition(order_id, "completed", payment_details=PAYMENT),
            lambda: get_ledger().transition(
                order_id, "completed", payment_details={**PAYMENT, "transaction_id": "txn-002"}
            ),
            slow_status_change,
        )

        assert ledger.get(order_id).payment_details.transaction_id == "txn-001"
