"""Storefront FastAPI application.

Web server for the cart, checkout, payment-return and admin order routes.
Commands are processed synchronously; each request runs inside the ordering
domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied (memory provider by
# default, sqlite/postgres via SQLAlchemy in the overlays).
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ordering.domain import ordering
from ordering.utils.logging import add_context, clear_context

ordering.init()

_DOMAIN_PREFIXES = ("/carts", "/checkout", "/payments", "/admin")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Digital-goods storefront: cart, checkout, payment settlement and order admin",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ordering domain context for every domain route."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with ordering.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api import (  # noqa: E402
    admin_router,
    cart_router,
    checkout_router,
    payment_router,
    register_store_exception_handlers,
)

app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(payment_router)
app.include_router(admin_router)
register_store_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "ordering": {"name": ordering.name},
            },
        }
    )
