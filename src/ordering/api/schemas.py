"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartLineSchema(BaseModel):
    product_id: str
    quantity: int


class CartResponse(BaseModel):
    session_id: str
    items: list[CartLineSchema] = []
    item_count: int = 0


# ---------------------------------------------------------------------------
# Checkout & payment return
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    session_id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    notes: str | None = None
    currency: str = "USD"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "session_id": "sess-7f3a",
                    "first_name": "Nadia",
                    "last_name": "Rahman",
                    "email": "nadia@example.com",
                    "phone": "+8801700000000",
                    "notes": "Send the code by email",
                    "currency": "BDT",
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
    order_id: str
    payment_url: str
    total_amount: str
    currency: str


class ReconciliationResponse(BaseModel):
    transaction_id: str
    verified: bool
    message: str
    order_id: str | None = None
    order_status: str | None = None
    payment_method: str | None = None
    paid_amount: str | None = None
    currency: str | None = None


class PaymentCancelledResponse(BaseModel):
    status: str = "cancelled"
    message: str


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------
class UpdateOrderRequest(BaseModel):
    status: str | None = None
    notes: str | None = None


class ReapPendingRequest(BaseModel):
    threshold_hours: int | None = Field(default=None, ge=1)
    as_of: datetime | None = None


class ReapPendingResponse(BaseModel):
    cutoff: datetime
    cancelled: list[str]
    failed: list[str]


class StatusResponse(BaseModel):
    status: str = "ok"
