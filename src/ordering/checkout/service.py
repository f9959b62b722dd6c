"""Checkout: the first half of the payment saga.

    cart → assemble → place pending order → open gateway checkout

The order is persisted before the gateway is called so the gateway's
metadata can carry a real order id. If the gateway refuses, the pending
order is rolled back and ``PaymentInitiationError`` is raised; the cart is
left as it was so the customer can try again. The cart is never cleared
here, even on success.
"""

from dataclasses import dataclass

from ordering.cart.management import load_cart
from ordering.checkout.assembler import CustomerDetails, OrderAssembler
from ordering.checkout.catalog import get_catalog
from ordering.config import get_settings
from ordering.domain import logger
from ordering.errors import PaymentInitiationError
from ordering.order.ledger import get_ledger
from payments.gateway import get_gateway
from payments.gateway.port import ChargeLine, ChargeRequest


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    payment_url: str
    total_amount: str
    currency: str


def _charge_request(draft, settings) -> ChargeRequest:
    return ChargeRequest(
        order_id=draft.order_id,
        customer_name=draft.customer_name,
        customer_email=draft.customer_email,
        customer_phone=draft.customer_phone,
        total_amount=draft.total_amount,
        currency=draft.currency.value,
        items=tuple(
            ChargeLine(
                product_id=line.product_id,
                name=line.name,
                quantity=line.quantity,
                price=float(line.unit_price),
                duration=line.duration,
            )
            for line in draft.lines
        ),
        success_url=settings.payment_success_url,
        cancel_url=settings.payment_cancel_url,
    )


class CheckoutService:
    def __init__(self, ledger=None, gateway=None, catalog=None, settings=None):
        self.ledger = ledger or get_ledger()
        self.gateway = gateway or get_gateway()
        self.catalog = catalog or get_catalog()
        self.settings = settings or get_settings()

    def checkout(self, session_id, customer: CustomerDetails, currency) -> CheckoutResult:
        cart = load_cart(session_id)
        assembler = OrderAssembler.from_settings(self.catalog, self.settings, is_taken=self.ledger.exists)
        draft = assembler.assemble(cart.lines(), customer, currency)

        order_id = self.ledger.place(draft)
        logger.info("Pending order placed", order_id=order_id, session_id=str(session_id))

        try:
            result = self.gateway.create_charge(_charge_request(draft, self.settings))
        except Exception as exc:
            logger.exception("Payment gateway raised on create", order_id=order_id)
            self.ledger.discard(order_id, reason=f"payment initiation raised: {exc}")
            raise PaymentInitiationError(order_id, str(exc) or type(exc).__name__) from exc

        if not result.success:
            logger.warning("Payment initiation failed", order_id=order_id, error=result.error)
            self.ledger.discard(order_id, reason=f"payment initiation failed: {result.error}")
            raise PaymentInitiationError(order_id, result.error or "unknown gateway error")

        logger.info("Redirecting to payment gateway", order_id=order_id)
        return CheckoutResult(
            order_id=order_id,
            payment_url=result.payment_url,
            total_amount=draft.total_amount,
            currency=draft.currency.value,
        )
