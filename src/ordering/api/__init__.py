"""Ordering domain API package."""

from ordering.api.errors import install_exception_handlers
from ordering.api.routes import cart_router, order_router

__all__ = ["order_router", "cart_router", "install_exception_handlers"]
