"""Order status changes: commands and handler.

Both the payment reconciler and the admin dashboard land here; there is no
other way to mutate an order's status.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.transitions import OrderStatus


@ordering.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    target_status = String(required=True, choices=OrderStatus)
    reason = String(max_length=500)
    payment_details = Text()  # JSON: transaction_id, payment_method, paid_amount, currency


@ordering.command(part_of="Order")
class AmendOrder:
    """Free-form admin edit of status and/or notes."""

    order_id = Identifier(required=True)
    status = String(choices=OrderStatus)
    notes = Text()
    reason = String(max_length=500)
    expected_status = String(choices=OrderStatus)  # reject if the order has moved on


@ordering.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        payment_details = json.loads(command.payment_details) if command.payment_details else None
        changed = order.apply_status(
            command.target_status,
            payment_details=payment_details,
            reason=command.reason,
        )
        if changed:
            repo.add(order)
        return changed

    @handle(AmendOrder)
    def amend_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if command.expected_status and order.status != command.expected_status:
            raise ValidationError({"status": [f"Order {order.id} is {order.status}, expected {command.expected_status}"]})

        changed = order.amend(
            status=command.status,
            notes=command.notes,
            reason=command.reason or "admin update",
        )
        if changed:
            repo.add(order)
        return changed
