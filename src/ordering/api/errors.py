"""Map ordering exceptions to HTTP responses.

NotFound → 404, Forbidden → 403, conflicts with the order's current state
or with stock → 409, every other validation failure → 400.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from ordering.errors import (
    AlreadyPaid,
    Forbidden,
    InsufficientStock,
    InvalidStateTransition,
    PaymentDeclined,
    PaymentNotCompleted,
    RefundExceedsTotal,
)

CONFLICTS = (
    InsufficientStock,
    InvalidStateTransition,
    AlreadyPaid,
    PaymentNotCompleted,
    RefundExceedsTotal,
    PaymentDeclined,
)


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:  # noqa: ARG001
    return JSONResponse(status_code=404, content={"error": type(exc).__name__, "detail": str(exc)})


async def _forbidden(request: Request, exc: Forbidden) -> JSONResponse:  # noqa: ARG001
    return JSONResponse(status_code=403, content={"error": "Forbidden", "detail": str(exc)})


async def _conflict(request: Request, exc: ValidationError) -> JSONResponse:  # noqa: ARG001
    return JSONResponse(status_code=409, content={"error": type(exc).__name__, "detail": exc.messages})


async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:  # noqa: ARG001
    return JSONResponse(status_code=400, content={"error": type(exc).__name__, "detail": exc.messages})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(Forbidden, _forbidden)
    for conflict in CONFLICTS:
        app.add_exception_handler(conflict, _conflict)
    app.add_exception_handler(ValidationError, _invalid)
