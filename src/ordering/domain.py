"""Ordering bounded context: shopping cart, checkout and order settlement.

Handles the customer's cart, order assembly with currency conversion, the
two-phase payment saga against the external gateway, and the order state
machine shared by the reconciler and the admin dashboard.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

ordering = Domain(name="ordering")
