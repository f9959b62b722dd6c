"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- HttpPaymentGateway when ``STOREFRONT_GATEWAY_BASE_URL`` is configured
"""

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.http_adapter import HttpPaymentGateway
from payments.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_default_gateway() -> PaymentGateway:
    from ordering.config import get_settings

    settings = get_settings()
    if not settings.gateway_base_url:
        return FakeGateway()
    return HttpPaymentGateway(
        base_url=settings.gateway_base_url,
        api_key=settings.gateway_api_key,
        timeout=settings.gateway_timeout_seconds,
        verify_attempts=settings.gateway_verify_attempts,
        backoff_seconds=settings.gateway_backoff_seconds,
    )


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building the configured default on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
