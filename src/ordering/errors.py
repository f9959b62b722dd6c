"""Errors raised by the ordering domain.

Input and state-machine violations subclass protean's ``ValidationError`` so
they carry field-keyed messages like every other domain rule. Gateway and
storage failures are plain exceptions: they are not the caller's fault.
"""

from protean.exceptions import ValidationError


class EmptyCartError(ValidationError):
    def __init__(self, messages=None):
        super().__init__(messages or {"cart": ["Cart is empty"]})


class InvalidCustomerDataError(ValidationError):
    pass


class UnsupportedCurrencyError(ValidationError):
    pass


class UnknownProductError(ValidationError):
    """A cart line references a product the catalog snapshot does not carry."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__({"product_id": [f"Product {product_id} is not available in the catalog"]})


class InvalidTransitionError(ValidationError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__({"status": [f"Cannot transition from {current} to {requested}"]})


class PaymentInitiationError(Exception):
    """The gateway refused (or could not be reached for) a new charge.

    The pending order has already been rolled back when this is raised.
    """

    def __init__(self, order_id: str, reason: str):
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Payment initialization failed for {order_id}: {reason}")


class LedgerStorageError(Exception):
    """Reading or writing the order ledger failed; nothing was persisted."""
