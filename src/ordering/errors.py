"""Error taxonomy for the ordering pipeline.

Input, stock, payment and transition failures are ``ValidationError``
subclasses so they share Protean's ``messages`` shape and render as 400s.
Missing orders or products are ``ObjectNotFoundError`` (404). The remaining
errors carry their own HTTP status.
"""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError


class OrderingError(Exception):
    """Base exception for ordering errors that are not validation failures."""

    status_code = 500

    def __init__(self, messages: dict):
        self.messages = messages
        super().__init__(messages)


@dataclass(frozen=True)
class StockShortage:
    product_id: str
    name: str
    requested: int
    available: int

    def describe(self) -> str:
        return f'"{self.name}" only has {self.available} left (requested {self.requested})'


class InsufficientStockError(ValidationError):
    """Raised when one or more cart lines exceed the product's stock."""

    def __init__(self, shortages: list[StockShortage]):
        self.shortages = list(shortages)
        super().__init__({"stock": [shortage.describe() for shortage in self.shortages]})


class PaymentRejectedError(ValidationError):
    """Raised when a payment handler rejects the payment info or the charge."""

    def __init__(self, method: str, message: str):
        self.method = method
        super().__init__({"payment": [f"{method}: {message}"]})


class TransitionError(ValidationError):
    """Raised for an illegal order status change."""

    def __init__(self, current: str, requested: str, reason: str | None = None):
        self.current = current
        self.requested = requested
        message = reason or f"Cannot transition from {current} to {requested}"
        super().__init__({"status": [message]})


class NotFoundError(ObjectNotFoundError):
    """Raised when an order or product does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        self.messages = {"_entity": [f"{kind} {identifier} not found"]}
        super().__init__(self.messages)


class AuthorizationError(OrderingError):
    """Raised when the caller is anonymous (401) or lacks access (403)."""

    def __init__(self, message: str, authenticated: bool = True):
        self.status_code = 403 if authenticated else 401
        super().__init__({"auth": [message]})


class InventoryCommitError(OrderingError):
    """Raised when the stock commit fails for a reason other than shortage."""

    status_code = 500

    def __init__(self, product_id: str, reason: str):
        self.product_id = product_id
        super().__init__({"inventory": [f"Product {product_id}: {reason}"]})
