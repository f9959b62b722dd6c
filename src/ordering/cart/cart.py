"""Shopping Cart aggregate (CQRS): the customer's pending selections for one session.

The cart is identified by the browsing session id. Lines are keyed by
product id: adding a product that is already in the cart increases its
quantity instead of adding a second line. Catalog validation is deliberately
absent here; unknown products are caught when the order is assembled.

The cart survives checkout. It is only emptied when the customer clears it,
so a failed payment attempt never loses the selection.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from ordering.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from ordering.domain import ordering


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@ordering.aggregate
class ShoppingCart:
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id):
        now = datetime.now(UTC)
        return cls(id=session_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def lines(self) -> dict[str, int]:
        """Snapshot of the cart as ``{product_id: quantity}``, in insertion order."""
        return {str(item.product_id): item.quantity for item in self.items}

    @property
    def is_empty(self) -> bool:
        return not self.items

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity):
        """Add a product to the cart (or increase its quantity if already present)."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.line_for(product_id)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            new_quantity = existing.quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, added_at=now))
            new_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=new_quantity,
            )
        )

    def set_quantity(self, product_id, quantity):
        """Replace the quantity of an existing line."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = self.line_for(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Product not found in cart"]})

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove a product line from the cart."""
        item = self.line_for(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Product not found in cart"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def clear(self):
        """Empty the cart. Clearing an empty cart is a no-op."""
        if not self.items:
            return

        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(CartCleared(cart_id=str(self.id), removed_lines=removed, cleared_at=now))
