"""Cart management: clearing and loading carts by session."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    """Explicit customer action: empty the cart."""

    session_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        try:
            cart = repo.get(command.session_id)
        except ObjectNotFoundError:
            return
        cart.clear()
        repo.add(cart)


def load_cart(session_id) -> ShoppingCart:
    """Return the session's cart, or a fresh unsaved empty one."""
    try:
        return current_domain.repository_for(ShoppingCart).get(session_id)
    except ObjectNotFoundError:
        return ShoppingCart.create(session_id=session_id)
