"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement, so
the checkout and reconciliation flows never care whether they talk to the
FakeGateway (dev/test) or the hosted gateway over HTTP.

The gateway is a hosted-checkout service: ``create_charge`` returns a URL
the customer is redirected to, and once the customer comes back with a
transaction reference, ``verify_charge`` reports what actually happened.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

STATUS_COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class ChargeLine:
    product_id: str
    name: str
    quantity: int
    price: float
    duration: str | None = None

    def to_payload(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class ChargeRequest:
    """Everything the gateway needs to open a hosted checkout.

    ``total_amount`` is already converted and formatted for ``currency``
    (``"2200"`` for BDT, ``"20.00"`` for USD). ``order_id`` comes back in
    the verification metadata and is the only correlation key.
    """

    order_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    total_amount: str
    currency: str
    items: tuple[ChargeLine, ...] = ()
    success_url: str | None = None
    cancel_url: str | None = None

    def to_payload(self) -> dict:
        payload = {
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "items": [line.to_payload() for line in self.items],
            "totalAmount": self.total_amount,
            "currency": self.currency,
            "orderId": self.order_id,
        }
        if self.success_url:
            payload["successUrl"] = self.success_url
        if self.cancel_url:
            payload["cancelUrl"] = self.cancel_url
        return payload


@dataclass(frozen=True)
class ChargeResult:
    """Result of a charge creation attempt."""

    success: bool
    payment_url: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class VerifiedCharge:
    """What the gateway reports about one transaction."""

    status: str
    transaction_id: str
    payment_method: str | None = None
    amount: str | None = None
    currency: str | None = None
    fullname: str | None = None
    email: str | None = None
    meta_data: dict = field(default_factory=dict)

    @property
    def order_id(self) -> str | None:
        return self.meta_data.get("orderId")

    @property
    def is_completed(self) -> bool:
        return (self.status or "").upper() == STATUS_COMPLETED

    @classmethod
    def from_payload(cls, data: dict) -> "VerifiedCharge":
        return cls(
            status=str(data.get("status") or ""),
            transaction_id=str(data.get("transaction_id") or ""),
            payment_method=data.get("payment_method"),
            amount=None if data.get("amount") is None else str(data["amount"]),
            currency=data.get("currency"),
            fullname=data.get("fullname"),
            email=data.get("email"),
            meta_data=dict(data.get("meta_data") or {}),
        )


@dataclass(frozen=True)
class VerifyResult:
    """Result of a verification attempt."""

    success: bool
    data: VerifiedCharge | None = None
    error: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface.

    Adapters never raise for gateway or transport failures; they return an
    unsuccessful result carrying the error text.
    """

    @abstractmethod
    def create_charge(self, request: ChargeRequest) -> ChargeResult:
        """Open a hosted checkout for ``request``."""
        ...

    @abstractmethod
    def verify_charge(self, transaction_id: str) -> VerifyResult:
        """Look up the outcome of a transaction."""
        ...
