"""Order placement and rollback: commands and handler."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import logger, ordering
from ordering.order.order import Order
from ordering.order.transitions import OrderStatus


@ordering.command(part_of="Order")
class PlaceOrder:
    order_id = Identifier(required=True)
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=254)
    customer_phone = String(required=True, max_length=50)
    items = Text(required=True)  # JSON: list of line item dicts
    subtotal = Float(required=True)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    total = Float(required=True)
    currency = String(required=True, max_length=3)
    notes = Text()


@ordering.command(part_of="Order")
class DiscardPendingOrder:
    """Roll back an order whose charge could never be created."""

    order_id = Identifier(required=True)
    reason = String(max_length=500)


@ordering.command_handler(part_of=Order)
class OrderPlacementHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        repo = current_domain.repository_for(Order)
        try:
            repo.get(command.order_id)
        except ObjectNotFoundError:
            pass
        else:
            raise ValidationError({"order_id": [f"Order {command.order_id} already exists"]})

        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        order = Order.place(
            order_id=command.order_id,
            customer={
                "name": command.customer_name,
                "email": command.customer_email,
                "phone": command.customer_phone,
            },
            items_data=items_data,
            totals={
                "subtotal": command.subtotal,
                "tax": command.tax or 0.0,
                "shipping": command.shipping or 0.0,
                "total": command.total,
            },
            currency=command.currency,
            notes=command.notes,
        )
        repo.add(order)
        return str(order.id)

    @handle(DiscardPendingOrder)
    def discard_pending_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.current_status != OrderStatus.PENDING:
            raise ValidationError({"status": [f"Only pending orders can be discarded, order is {order.status}"]})

        repo._dao.delete(order)
        logger.info("Discarded pending order", order_id=command.order_id, reason=command.reason)
