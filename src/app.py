"""SmartStore Ordering FastAPI application.

Serves the checkout and order lifecycle over HTTP. Commands are processed
synchronously inside the ordering domain context pushed per request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized once at import; PROTEAN_ENV picks the domain.toml overlay.
# Under "production" the checkout stats projector runs asynchronously and
# orders are stored in PostgreSQL.
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ordering.domain import ordering
from ordering.utils.logging import add_context, clear_context, configure_logging

configure_logging()
ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="SmartStore Ordering API",
    description="Checkout, order lifecycle and customer cart",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_DOMAIN_PREFIXES = ("/orders", "/cart")


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ordering domain context for domain routes."""
    if not request.url.path.startswith(_DOMAIN_PREFIXES):
        # Health check, docs
        return await call_next(request)

    clear_context()
    add_context(request_id=request.headers.get("x-request-id") or uuid4().hex[:12], path=request.url.path)
    with ordering.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api import cart_router, install_exception_handlers, order_router  # noqa: E402

app.include_router(order_router)
app.include_router(cart_router)
install_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": ordering.name})
