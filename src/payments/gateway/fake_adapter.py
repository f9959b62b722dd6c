"""Configurable fake payment gateway for development and testing.

This adapter simulates the hosted gateway without any external calls. It
remembers every charge it opened, so ``verify_charge`` can answer with the
right order id and amount, and it can be configured at runtime to fail
either phase:

- ``configure(should_succeed=False)`` makes ``create_charge`` fail
- ``configure(verify_status="FAILED")`` reports an unpaid transaction
- ``configure(verify_succeeds=False)`` makes the verification call itself fail
"""

from uuid import uuid4

from payments.gateway.port import (
    STATUS_COMPLETED,
    ChargeRequest,
    ChargeResult,
    PaymentGateway,
    VerifiedCharge,
    VerifyResult,
)

FAKE_CHECKOUT_URL = "https://pay.example.test/checkout"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.verify_succeeds: bool = True
        self.verify_status: str = STATUS_COMPLETED
        self.payment_method: str = "bkash"
        self.calls: list[dict] = []
        self.charges: dict[str, ChargeRequest] = {}

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Gateway unavailable",
        verify_succeeds: bool = True,
        verify_status: str = STATUS_COMPLETED,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.verify_succeeds = verify_succeeds
        self.verify_status = verify_status

    def create_charge(self, request: ChargeRequest) -> ChargeResult:
        self.calls.append({"method": "create_charge", "request": request})

        if not self.should_succeed:
            return ChargeResult(success=False, error=self.failure_reason)

        transaction_id = f"fake_txn_{uuid4().hex[:12]}"
        self.charges[transaction_id] = request
        return ChargeResult(
            success=True,
            payment_url=f"{FAKE_CHECKOUT_URL}?transactionID={transaction_id}",
        )

    def verify_charge(self, transaction_id: str) -> VerifyResult:
        self.calls.append({"method": "verify_charge", "transaction_id": transaction_id})

        if not self.verify_succeeds:
            return VerifyResult(success=False, error=self.failure_reason)

        request = self.charges.get(transaction_id)
        if request is None:
            return VerifyResult(success=False, error=f"Unknown transaction {transaction_id}")

        return VerifyResult(
            success=True,
            data=VerifiedCharge(
                status=self.verify_status,
                transaction_id=transaction_id,
                payment_method=self.payment_method,
                amount=request.total_amount,
                currency=request.currency,
                fullname=request.customer_name,
                email=request.customer_email,
                meta_data={
                    "orderId": request.order_id,
                    "items": [line.to_payload() for line in request.items],
                },
            ),
        )

    @property
    def last_transaction_id(self) -> str | None:
        """The most recently opened transaction, handy when driving the flow by hand."""
        if not self.charges:
            return None
        return next(reversed(self.charges))
