"""Ordering domain API package."""

from ordering.api.handlers import register_store_exception_handlers
from ordering.api.routes import admin_router, cart_router, checkout_router, payment_router

__all__ = [
    "admin_router",
    "cart_router",
    "checkout_router",
    "payment_router",
    "register_store_exception_handlers",
]
