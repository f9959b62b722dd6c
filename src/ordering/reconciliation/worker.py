"""Payment reconciliation: the second half of the payment saga.

When the customer lands back on the success page with a transaction
reference, the gateway is asked what really happened. Only a verification
that succeeded, reports ``COMPLETED`` and names an order we hold moves that
order to completed. Anything else leaves the order pending and hands the
customer a message to show; the reaper or an administrator settles it later.

Reconciling the same transaction twice is harmless: the second completion
request is a no-op on an already-completed order.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import structlog
from protean.exceptions import ObjectNotFoundError

from ordering.errors import InvalidTransitionError
from ordering.order.ledger import get_ledger
from ordering.order.transitions import OrderStatus
from payments.gateway import get_gateway

logger = structlog.get_logger(__name__)

UNVERIFIED_MESSAGE = (
    "We could not verify your payment. If you were charged, please contact support "
    "with your transaction ID."
)
CONFLICT_MESSAGE = (
    "Your payment was received but the order had already been cancelled. "
    "Please contact support with your transaction ID."
)
SUCCESS_MESSAGE = "Payment verified. Your order is complete."


@dataclass(frozen=True)
class ReconciliationOutcome:
    transaction_id: str
    verified: bool
    message: str
    order_id: str | None = None
    order_status: str | None = None
    payment_method: str | None = None
    paid_amount: str | None = None
    currency: str | None = None


def _paid_amount(charge) -> float | None:
    """The gateway's amount as a number, or None when it sent something unreadable."""
    if charge.amount in (None, ""):
        return None
    try:
        amount = Decimal(str(charge.amount))
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        logger.warning("Unreadable paid amount from gateway", transaction_id=charge.transaction_id, amount=charge.amount)
        return None
    return float(amount)


class ReconciliationWorker:
    def __init__(self, ledger=None, gateway=None):
        self.ledger = ledger or get_ledger()
        self.gateway = gateway or get_gateway()

    def reconcile(self, transaction_id: str) -> ReconciliationOutcome:
        result = self.gateway.verify_charge(transaction_id)
        if not result.success or result.data is None:
            logger.warning("Payment verification failed", transaction_id=transaction_id, error=result.error)
            return ReconciliationOutcome(transaction_id=transaction_id, verified=False, message=UNVERIFIED_MESSAGE)

        charge = result.data
        order_id = charge.order_id
        if not charge.is_completed or not order_id:
            logger.warning(
                "Payment not completed",
                transaction_id=transaction_id,
                gateway_status=charge.status,
                order_id=order_id,
            )
            return ReconciliationOutcome(
                transaction_id=transaction_id,
                verified=False,
                message=UNVERIFIED_MESSAGE,
                order_id=order_id,
            )

        payment_details = {
            "transaction_id": charge.transaction_id or transaction_id,
            "payment_method": charge.payment_method,
            "paid_amount": _paid_amount(charge),
            "currency": charge.currency,
        }
        try:
            order = self.ledger.transition(
                order_id,
                OrderStatus.COMPLETED,
                payment_details=payment_details,
                reason=f"payment verified ({transaction_id})",
            )
        except ObjectNotFoundError:
            logger.error("Verified payment for unknown order", transaction_id=transaction_id, order_id=order_id)
            return ReconciliationOutcome(
                transaction_id=transaction_id,
                verified=False,
                message=UNVERIFIED_MESSAGE,
                order_id=order_id,
            )
        except InvalidTransitionError as exc:
            logger.error(
                "Verified payment conflicts with order status",
                transaction_id=transaction_id,
                order_id=order_id,
                order_status=exc.current,
            )
            return ReconciliationOutcome(
                transaction_id=transaction_id,
                verified=True,
                message=CONFLICT_MESSAGE,
                order_id=order_id,
                order_status=exc.current,
                payment_method=charge.payment_method,
                paid_amount=charge.amount,
                currency=charge.currency,
            )

        logger.info("Payment reconciled", transaction_id=transaction_id, order_id=order_id, status=order.status)
        return ReconciliationOutcome(
            transaction_id=transaction_id,
            verified=True,
            message=SUCCESS_MESSAGE,
            order_id=order_id,
            order_status=order.status,
            payment_method=charge.payment_method,
            paid_amount=charge.amount,
            currency=charge.currency,
        )
