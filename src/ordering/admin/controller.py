"""Back-office order management.

The dashboard's one-click buttons map onto single transitions; the edit
form maps onto ``update``. Every path goes through the ledger, so the
administrator is held to the same transition table as the reconciler and
an impossible edge is refused rather than coerced.
"""

import structlog

from ordering.order.ledger import get_ledger
from ordering.order.transitions import OrderStatus

logger = structlog.get_logger(__name__)


class AdminOrderController:
    def __init__(self, ledger=None):
        self.ledger = ledger or get_ledger()

    def list_orders(self, query=None, status=None):
        return self.ledger.search(query=query or None, status=status or None)

    def get_order(self, order_id):
        return self.ledger.get(order_id)

    def _move(self, order_id, target: OrderStatus, action: str):
        order = self.ledger.transition(order_id, target, reason=f"admin {action}")
        logger.info("Admin order action", order_id=str(order_id), action=action, status=order.status)
        return order

    def process(self, order_id):
        return self._move(order_id, OrderStatus.PROCESSING, "process")

    def confirm(self, order_id):
        return self._move(order_id, OrderStatus.COMPLETED, "confirm")

    def cancel(self, order_id):
        return self._move(order_id, OrderStatus.CANCELLED, "cancel")

    def reopen(self, order_id):
        """Bring a cancelled order back into processing."""
        return self._move(order_id, OrderStatus.PROCESSING, "reopen")

    def update(self, order_id, status=None, notes=None):
        """Edit-form save. Blank fields keep their current value."""
        status = (status or "").strip() or None
        notes = (notes or "").strip() or None
        order = self.ledger.amend(order_id, status=status, notes=notes, reason="admin update")
        logger.info("Admin order update", order_id=str(order_id), status=order.status, notes_changed=bool(notes))
        return order
