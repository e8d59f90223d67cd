"""Storefront ordering FastAPI application.

Serves the ordering core over HTTP, processing commands synchronously.
Each request runs inside the ordering domain's context.

Usage:
    pip install -e ".[serve]"
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ordering.api.errors import register_error_handlers
from ordering.api.routes import cart_router, order_router
from ordering.domain import ordering
from ordering.utils.logging import configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay from domain.toml
configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "console") == "json",
)
ordering.init()

app = FastAPI(
    title="Storefront Ordering API",
    description="Order placement, lifecycle, payment and refunds",
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
    """Push the ordering domain context for each request."""
    with ordering.domain_context():
        response = await call_next(request)
    return response


register_error_handlers(app)
app.include_router(order_router)
app.include_router(cart_router)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": ordering.name})
