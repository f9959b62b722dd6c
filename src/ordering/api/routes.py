"""FastAPI routes for the Ordering domain: carts, checkout, payment return and admin.

Routes that call the payment gateway or take the ledger's per-order locks
are plain ``def`` so FastAPI runs them in its threadpool, off the event loop.
"""

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from ordering.admin.controller import AdminOrderController
from ordering.api.schemas import (
    AddToCartRequest,
    CartLineSchema,
    CartResponse,
    CheckoutRequest,
    CheckoutResponse,
    PaymentCancelledResponse,
    ReapPendingRequest,
    ReapPendingResponse,
    ReconciliationResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderRequest,
)
from ordering.cart.items import AddToCart, RemoveFromCart, SetCartQuantity
from ordering.cart.management import ClearCart, load_cart
from ordering.checkout.assembler import CustomerDetails
from ordering.checkout.service import CheckoutService
from ordering.reconciliation.reaper import PendingOrderReaper
from ordering.reconciliation.worker import ReconciliationWorker


def _cart_response(session_id: str) -> CartResponse:
    cart = load_cart(session_id)
    lines = cart.lines()
    return CartResponse(
        session_id=session_id,
        items=[CartLineSchema(product_id=pid, quantity=qty) for pid, qty in lines.items()],
        item_count=sum(lines.values()),
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{session_id}", response_model=CartResponse)
async def get_cart(session_id: str) -> CartResponse:
    return _cart_response(session_id)


@cart_router.post("/{session_id}/items", response_model=CartResponse)
async def add_cart_item(session_id: str, body: AddToCartRequest) -> CartResponse:
    command = AddToCart(
        session_id=session_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(session_id)


@cart_router.put("/{session_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item_quantity(session_id: str, product_id: str, body: UpdateCartQuantityRequest) -> CartResponse:
    command = SetCartQuantity(
        session_id=session_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(session_id)


@cart_router.delete("/{session_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(session_id: str, product_id: str) -> CartResponse:
    command = RemoveFromCart(
        session_id=session_id,
        product_id=product_id,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(session_id)


@cart_router.delete("/{session_id}", response_model=StatusResponse)
async def clear_cart(session_id: str) -> StatusResponse:
    current_domain.process(ClearCart(session_id=session_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(tags=["checkout"])


@checkout_router.post("/checkout", status_code=201, response_model=CheckoutResponse)
def checkout(body: CheckoutRequest) -> CheckoutResponse:
    """Place a pending order for the session's cart and open a gateway checkout.

    The cart is kept; the customer clears it explicitly.
    """
    customer = CustomerDetails(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone=body.phone,
        notes=body.notes,
    )
    result = CheckoutService().checkout(body.session_id, customer, body.currency)
    return CheckoutResponse(
        order_id=result.order_id,
        payment_url=result.payment_url,
        total_amount=result.total_amount,
        currency=result.currency,
    )


# ---------------------------------------------------------------------------
# Payment Return Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.get("/success", response_model=ReconciliationResponse)
def payment_success(transaction_id: str = Query(alias="transactionID", min_length=1)) -> ReconciliationResponse:
    outcome = ReconciliationWorker().reconcile(transaction_id)
    return ReconciliationResponse(
        transaction_id=outcome.transaction_id,
        verified=outcome.verified,
        message=outcome.message,
        order_id=outcome.order_id,
        order_status=outcome.order_status,
        payment_method=outcome.payment_method,
        paid_amount=outcome.paid_amount,
        currency=outcome.currency,
    )


@payment_router.get("/cancel", response_model=PaymentCancelledResponse)
async def payment_cancel() -> PaymentCancelledResponse:
    return PaymentCancelledResponse(
        message="Payment was cancelled. Your cart is still saved and you can check out again.",
    )


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_router.get("")
def list_orders(q: str | None = None, status: str | None = None) -> list[dict]:
    return [order.to_record() for order in AdminOrderController().list_orders(query=q, status=status)]


@admin_router.post("/maintenance/reap-pending", response_model=ReapPendingResponse)
def reap_pending_orders(body: ReapPendingRequest | None = None) -> ReapPendingResponse:
    """Cancel pending orders older than the threshold.

    Designed to be called periodically by an external scheduler.
    """
    body = body or ReapPendingRequest()
    report = PendingOrderReaper().reap(threshold_hours=body.threshold_hours, as_of=body.as_of)
    return ReapPendingResponse(cutoff=report.cutoff, cancelled=report.cancelled, failed=report.failed)


@admin_router.get("/{order_id}")
def get_order(order_id: str) -> dict:
    return AdminOrderController().get_order(order_id).to_record()


@admin_router.put("/{order_id}/process")
def process_order(order_id: str) -> dict:
    return AdminOrderController().process(order_id).to_record()


@admin_router.put("/{order_id}/confirm")
def confirm_order(order_id: str) -> dict:
    return AdminOrderController().confirm(order_id).to_record()


@admin_router.put("/{order_id}/cancel")
def cancel_order(order_id: str) -> dict:
    return AdminOrderController().cancel(order_id).to_record()


@admin_router.put("/{order_id}/reopen")
def reopen_order(order_id: str) -> dict:
    return AdminOrderController().reopen(order_id).to_record()


@admin_router.put("/{order_id}")
def update_order(order_id: str, body: UpdateOrderRequest) -> dict:
    return AdminOrderController().update(order_id, status=body.status, notes=body.notes).to_record()
