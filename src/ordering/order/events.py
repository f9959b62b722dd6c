"""Domain events for the Order aggregate.

Events are immutable facts written to the event store alongside every
ledger write. They give the order an audit trail of who moved it where.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """An order was assembled from a cart and persisted as pending."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_email = String(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    currency = String(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along one edge of the transition table."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    reason = String(max_length=500)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaymentRecorded:
    """Verified gateway payment details were attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    transaction_id = String(required=True)
    payment_method = String()
    paid_amount = Float()
    currency = String()
    recorded_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderNotesUpdated:
    """An administrator replaced the free-form order notes."""

    __version__ = 1

    order_id = Identifier(required=True)
    notes = Text()
    updated_at = DateTime(required=True)
