"""Map storefront errors onto HTTP responses.

Registered after protean's own handlers so these status codes win:

    ValidationError          → 422
    InvalidTransitionError   → 409
    ObjectNotFoundError      → 404
    PaymentInitiationError   → 502
    LedgerStorageError       → 500 (details stay in the log)
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import InvalidTransitionError, LedgerStorageError, PaymentInitiationError

logger = structlog.get_logger(__name__)


async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"error": exc.messages})


async def _invalid_transition(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=409, content={"error": exc.messages})


async def _not_found(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc) or "Not found"})


async def _payment_initiation(request: Request, exc: PaymentInitiationError):
    return JSONResponse(
        status_code=502,
        content={"error": "Payment initialization failed", "reason": exc.reason, "order_id": exc.order_id},
    )


async def _ledger_storage(request: Request, exc: LedgerStorageError):
    logger.error("Order storage failure", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"error": "Order could not be saved. Please try again."})


def register_store_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(InvalidTransitionError, _invalid_transition)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(PaymentInitiationError, _payment_initiation)
    app.add_exception_handler(LedgerStorageError, _ledger_storage)
