import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from ordering.api import cart_router, install_exception_handlers, order_router
from ordering.auth import get_identity_provider


@pytest.fixture()
def client(ordering_bed):
    from ordering.domain import ordering

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with ordering.domain_context():
            return await call_next(request)

    app.include_router(order_router)
    app.include_router(cart_router)
    install_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def tokens(customer, other_customer, admin):
    """Bearer headers for the test identities."""
    provider = get_identity_provider()
    provider.register("token-customer", customer)
    provider.register("token-other", other_customer)
    provider.register("token-admin", admin)
    return {
        "customer": {"Authorization": "Bearer token-customer"},
        "other": {"Authorization": "Bearer token-other"},
        "admin": {"Authorization": "Bearer token-admin"},
    }
