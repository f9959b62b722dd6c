"""The order ledger: the one gateway to persisted orders.

Every write is an upsert of a single order, keyed by order number, executed
as a protean command (and therefore inside a unit of work). Writes for the
same order number are serialized by a striped lock that is held until the
unit of work has committed, so a customer returning from the gateway and an
administrator clicking "cancel" cannot overwrite each other's change.

The locks are process-local. Several API processes sharing one database
still need a database-level guard; until then the last writer wins across
processes.
"""

import json
import threading
from contextlib import contextmanager
from datetime import UTC, datetime
from zlib import crc32

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.domain import logger
from ordering.errors import LedgerStorageError
from ordering.order.creation import DiscardPendingOrder, PlaceOrder
from ordering.order.order import Order
from ordering.order.transition import AmendOrder, ChangeOrderStatus
from ordering.order.transitions import OrderStatus

_LOCK_STRIPES = 64
_PAGE_SIZE = 500


class _StripedLocks:
    def __init__(self, stripes=_LOCK_STRIPES):
        self._locks = [threading.RLock() for _ in range(stripes)]

    @contextmanager
    def hold(self, key):
        lock = self._locks[crc32(str(key).encode("utf-8")) % len(self._locks)]
        with lock:
            yield


def _status_value(status) -> str:
    try:
        return OrderStatus(status).value
    except ValueError as exc:
        raise ValidationError({"status": [f"Unknown order status: {status!r}"]}) from exc


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


class OrderLedger:
    def __init__(self):
        self._locks = _StripedLocks()

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def place(self, draft) -> str:
        """Persist an assembled order draft as a pending order."""
        command = PlaceOrder(
            order_id=draft.order_id,
            customer_name=draft.customer_name,
            customer_email=draft.customer_email,
            customer_phone=draft.customer_phone,
            items=json.dumps([line.as_dict() for line in draft.lines]),
            subtotal=float(draft.subtotal),
            tax=float(draft.tax),
            shipping=float(draft.shipping),
            total=float(draft.total),
            currency=draft.currency.value,
            notes=draft.notes,
        )
        with self._locks.hold(draft.order_id):
            return self._dispatch(command)

    def discard(self, order_id, reason=None) -> None:
        with self._locks.hold(order_id):
            self._dispatch(DiscardPendingOrder(order_id=order_id, reason=reason))

    def transition(self, order_id, target, payment_details=None, reason=None) -> Order:
        """Apply ``target`` through the transition table and return the stored order."""
        command = ChangeOrderStatus(
            order_id=order_id,
            target_status=_status_value(target),
            reason=reason,
            payment_details=json.dumps(payment_details) if payment_details else None,
        )
        with self._locks.hold(order_id):
            self._dispatch(command)
            return self.get(order_id)

    def amend(self, order_id, status=None, notes=None, reason=None, expected_status=None) -> Order:
        """Apply a status change and a notes replacement in one write.

        ``expected_status`` makes the write conditional: it is rejected if
        the stored order is no longer in that status.
        """
        command = AmendOrder(
            order_id=order_id,
            status=_status_value(status) if status else None,
            notes=notes or None,
            reason=reason,
            expected_status=_status_value(expected_status) if expected_status else None,
        )
        with self._locks.hold(order_id):
            self._dispatch(command)
            return self.get(order_id)

    def _dispatch(self, command):
        try:
            return current_domain.process(command, asynchronous=False)
        except (ValidationError, ObjectNotFoundError):
            raise
        except Exception as exc:
            logger.exception(
                "Order ledger write failed",
                command=type(command).__name__,
                order_id=str(command.order_id),
            )
            raise LedgerStorageError(f"Could not store order {command.order_id}") from exc

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get(self, order_id) -> Order:
        return current_domain.repository_for(Order).get(order_id)

    def exists(self, order_id) -> bool:
        try:
            self.get(order_id)
        except ObjectNotFoundError:
            return False
        return True

    def _fetch(self, **filters) -> list[Order]:
        dao = current_domain.repository_for(Order)._dao
        orders, offset = [], 0
        while True:
            query = dao.query.filter(**filters) if filters else dao.query
            page = query.offset(offset).limit(_PAGE_SIZE).all().items
            orders.extend(page)
            if len(page) < _PAGE_SIZE:
                return orders
            offset += _PAGE_SIZE

    def search(self, query=None, status=None) -> list[Order]:
        """Orders matching a case-insensitive substring and/or an exact status, newest first."""
        filters = {"status": _status_value(status)} if status else {}
        orders = self._fetch(**filters)

        if query:
            needle = query.strip().lower()
            orders = [
                order
                for order in orders
                if needle in str(order.id).lower()
                or needle in (order.customer.name or "").lower()
                or needle in (order.customer.email or "").lower()
            ]

        return sorted(orders, key=lambda o: (_naive_utc(o.created_at), str(o.id)), reverse=True)

    def pending_since(self, cutoff: datetime) -> list[Order]:
        """Pending orders created at or before ``cutoff``."""
        cutoff = _naive_utc(cutoff)
        return [
            order
            for order in self._fetch(status=OrderStatus.PENDING.value)
            if order.created_at and _naive_utc(order.created_at) <= cutoff
        ]


_ledger = OrderLedger()


def get_ledger() -> OrderLedger:
    return _ledger
