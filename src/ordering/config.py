"""Store settings read from the environment (prefix ``STOREFRONT_``) or ``.env``."""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # --- Pricing ---
    usd_to_bdt_rate: Decimal = Field(default=Decimal("110"), gt=0)
    tax_rate: Decimal = Field(default=Decimal("0"), ge=0)
    shipping_fee: Decimal = Field(default=Decimal("0"), ge=0)  # USD, flat per order

    # --- Catalog snapshot (JSON list of product records) ---
    catalog_path: str | None = None

    # --- Pending order reaper ---
    pending_order_ttl_hours: int = Field(default=24, ge=1)

    # --- Payment gateway ---
    gateway_base_url: str | None = None
    gateway_api_key: str | None = None
    gateway_timeout_seconds: float = 30.0
    gateway_verify_attempts: int = Field(default=3, ge=1)
    gateway_backoff_seconds: float = 0.5
    payment_success_url: str = "http://localhost:8000/payments/success"
    payment_cancel_url: str = "http://localhost:8000/payments/cancel"


@lru_cache
def get_settings() -> StoreSettings:
    return StoreSettings()
