"""Turn a cart into a priced, immutable order draft.

Assembly validates in a fixed order and stops at the first failing step:
the cart must have lines, the customer contact must be complete, and the
currency must be one we sell in. Only then is the catalog consulted.

All arithmetic is in ``Decimal``. The USD subtotal is summed exactly, then
subtotal, tax and shipping are each converted into the order currency and
rounded once. The total is the sum of those rounded parts, so
``total == subtotal + tax + shipping`` holds on the persisted order.
"""

import re
from dataclasses import dataclass
from decimal import Decimal

from ordering.checkout.catalog import CatalogSnapshot
from ordering.checkout.currency import Currency, format_amount, parse_currency, rate_for, round_amount
from ordering.checkout.identifiers import next_order_number
from ordering.domain import logger
from ordering.errors import EmptyCartError, InvalidCustomerDataError, UnknownProductError
from ordering.order.transitions import OrderStatus

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class CustomerDetails:
    first_name: str
    last_name: str
    email: str
    phone: str
    notes: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}"


@dataclass(frozen=True)
class DraftLine:
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal  # order currency, not rounded
    duration: str | None = None

    def as_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price),
            "duration": self.duration,
        }


@dataclass(frozen=True)
class OrderDraft:
    order_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    lines: tuple[DraftLine, ...]
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    currency: Currency
    notes: str | None = None
    status: str = OrderStatus.PENDING.value

    @property
    def total_amount(self) -> str:
        """Total as the gateway expects it."""
        return format_amount(self.total, self.currency)


def _validate_customer(customer: CustomerDetails) -> None:
    errors = {}
    for field_name in ("first_name", "last_name", "email", "phone"):
        if not (getattr(customer, field_name) or "").strip():
            errors[field_name] = ["is required"]

    if "email" not in errors and not EMAIL_PATTERN.match(customer.email.strip()):
        errors["email"] = ["is not a valid email address"]

    if errors:
        raise InvalidCustomerDataError(errors)


class OrderAssembler:
    def __init__(
        self,
        catalog: CatalogSnapshot,
        usd_to_bdt_rate,
        tax_rate=Decimal("0"),
        shipping_fee=Decimal("0"),
        is_taken=None,
    ):
        self.catalog = catalog
        self.usd_to_bdt_rate = Decimal(str(usd_to_bdt_rate))
        self.tax_rate = Decimal(str(tax_rate))
        self.shipping_fee = Decimal(str(shipping_fee))
        self.is_taken = is_taken

    @classmethod
    def from_settings(cls, catalog, settings, is_taken=None):
        return cls(
            catalog,
            usd_to_bdt_rate=settings.usd_to_bdt_rate,
            tax_rate=settings.tax_rate,
            shipping_fee=settings.shipping_fee,
            is_taken=is_taken,
        )

    def assemble(self, cart_lines, customer: CustomerDetails, currency) -> OrderDraft:
        """Price ``cart_lines`` (product id -> quantity) for ``customer`` in ``currency``."""
        cart_lines = dict(cart_lines or {})
        if not cart_lines:
            raise EmptyCartError()
        _validate_customer(customer)
        currency = parse_currency(currency)

        rate = rate_for(currency, self.usd_to_bdt_rate)
        subtotal_usd = Decimal("0")
        lines = []
        for product_id, quantity in cart_lines.items():
            product = self.catalog.lookup(product_id)
            option = product.default_option if product else None
            if option is None:
                raise UnknownProductError(str(product_id))

            subtotal_usd += option.unit_price * quantity
            lines.append(
                DraftLine(
                    product_id=product.product_id,
                    name=product.name,
                    quantity=int(quantity),
                    unit_price=option.unit_price * rate,
                    duration=option.duration,
                )
            )

        subtotal = round_amount(subtotal_usd * rate, currency)
        tax = round_amount(subtotal_usd * self.tax_rate * rate, currency)
        shipping = round_amount(self.shipping_fee * rate, currency)

        draft = OrderDraft(
            order_id=next_order_number(self.is_taken),
            customer_name=customer.full_name,
            customer_email=customer.email.strip(),
            customer_phone=customer.phone.strip(),
            lines=tuple(lines),
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=subtotal + tax + shipping,
            currency=currency,
            notes=(customer.notes or "").strip() or None,
        )
        logger.info(
            "Order assembled",
            order_id=draft.order_id,
            currency=currency.value,
            total=draft.total_amount,
            line_count=len(lines),
        )
        return draft
