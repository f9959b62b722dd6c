"""Order aggregate (CQRS): the persisted record of one checkout submission.

An Order is created pending, already priced in its final currency, and is
never re-priced: line items and totals are fixed at placement. Afterwards
the only thing that changes is the status (through the transition table in
``ordering.order.transitions``), the admin notes, and, exactly once, the
verified payment details.

The order number doubles as the aggregate identity and as the correlation
id carried through the payment gateway's metadata.
"""

from datetime import UTC, datetime
from decimal import Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.checkout.currency import Currency
from ordering.domain import ordering
from ordering.order.events import (
    OrderNotesUpdated,
    OrderPaymentRecorded,
    OrderPlaced,
    OrderStatusChanged,
)
from ordering.order.transitions import OrderStatus, resolve_transition

DELIVERY_TYPE_DIGITAL = "digital"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class CustomerContact:
    """Who placed the order, as typed at checkout."""

    name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    phone = String(required=True, max_length=50)


@ordering.value_object(part_of="Order")
class OrderTotals:
    """Totals in the order currency, already rounded for that currency."""

    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    total = Float(default=0.0)


@ordering.value_object(part_of="Order")
class PaymentDetails:
    """What the gateway reported when the payment was verified."""

    transaction_id = String(required=True, max_length=255)
    payment_method = String(max_length=100)
    paid_amount = Float()
    currency = String(max_length=3)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLineItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    duration = String(max_length=100)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer = ValueObject(CustomerContact)
    items = HasMany(OrderLineItem)
    totals = ValueObject(OrderTotals)
    currency = String(required=True, max_length=3, choices=Currency)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    delivery_type = String(max_length=20, default=DELIVERY_TYPE_DIGITAL)
    notes = Text()
    payment_details = ValueObject(PaymentDetails)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def totals_must_balance(self):
        if self.totals is None:
            return
        parts = sum(
            Decimal(str(value or 0.0)) for value in (self.totals.subtotal, self.totals.tax, self.totals.shipping)
        )
        if parts != Decimal(str(self.totals.total or 0.0)):
            raise ValidationError({"totals": ["Total must equal subtotal + tax + shipping"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_id, customer, items_data, totals, currency, notes=None):
        """Create a pending order.

        Args:
            order_id: The order number (``ORD-xxxxxxxx``).
            customer: Dict with name, email, phone.
            items_data: List of dicts with product_id, name, quantity,
                        unit_price, duration; prices in ``currency``.
            totals: Dict with subtotal, tax, shipping, total in ``currency``.
            currency: "USD" or "BDT".
            notes: Optional customer notes.
        """
        now = datetime.now(UTC)
        order = cls(
            id=order_id,
            customer=CustomerContact(**customer),
            items=[OrderLineItem(**item) for item in items_data],
            totals=OrderTotals(**totals),
            currency=Currency(currency).value,
            status=OrderStatus.PENDING.value,
            delivery_type=DELIVERY_TYPE_DIGITAL,
            notes=notes or None,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_email=order.customer.email,
                item_count=len(order.items),
                total=order.totals.total,
                currency=order.currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def apply_status(self, requested, payment_details=None, reason=None) -> bool:
        """Move the order to ``requested`` along the transition table.

        Re-requesting the current status changes nothing, so the reconciler
        and an admin racing to the same target both succeed. Payment details
        are attached at most once, and only to a completed order.

        Returns True when the order was modified.
        """
        previous = self.current_status
        target = resolve_transition(previous, requested)
        now = datetime.now(UTC)
        changed = False

        if target != previous:
            self.status = target.value
            self.updated_at = now
            changed = True
            self.raise_(
                OrderStatusChanged(
                    order_id=str(self.id),
                    previous_status=previous.value,
                    new_status=target.value,
                    reason=reason,
                    changed_at=now,
                )
            )

        if payment_details and target == OrderStatus.COMPLETED and self.payment_details is None:
            self._record_payment(payment_details, now)
            changed = True

        return changed

    def _record_payment(self, payment_details, now):
        self.payment_details = PaymentDetails(**payment_details)
        self.updated_at = now
        self.raise_(
            OrderPaymentRecorded(
                order_id=str(self.id),
                transaction_id=self.payment_details.transaction_id,
                payment_method=self.payment_details.payment_method,
                paid_amount=self.payment_details.paid_amount,
                currency=self.payment_details.currency,
                recorded_at=now,
            )
        )

    def amend(self, status=None, notes=None, reason="admin update") -> bool:
        """Admin edit: optional status change plus optional notes replacement.

        Blank values leave the current value in place. The status change is
        validated first so a rejected transition leaves the notes untouched.
        """
        changed = False
        if status:
            changed = self.apply_status(status, reason=reason)

        if notes and notes != self.notes:
            now = datetime.now(UTC)
            self.notes = notes
            self.updated_at = now
            changed = True
            self.raise_(OrderNotesUpdated(order_id=str(self.id), notes=notes, updated_at=now))

        return changed

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------
    def to_record(self) -> dict:
        """The persisted order record shape shared with the admin dashboard."""
        record = {
            "id": str(self.id),
            "date": self.created_at.isoformat() if self.created_at else None,
            "customer": {
                "name": self.customer.name,
                "email": self.customer.email,
                "phone": self.customer.phone,
            },
            "items": [
                {
                    "productId": str(item.product_id),
                    "name": item.name,
                    "quantity": item.quantity,
                    "price": item.unit_price,
                    "duration": item.duration,
                }
                for item in self.items
            ],
            "totals": {
                "subtotal": self.totals.subtotal,
                "tax": self.totals.tax,
                "shipping": self.totals.shipping,
                "total": self.totals.total,
            },
            "currency": self.currency,
            "status": self.status,
            "deliveryType": self.delivery_type,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if self.notes:
            record["notes"] = self.notes
        if self.payment_details:
            record["paymentDetails"] = {
                "transactionId": self.payment_details.transaction_id,
                "paymentMethod": self.payment_details.payment_method,
                "paidAmount": self.payment_details.paid_amount,
                "currency": self.payment_details.currency,
            }
        return record
