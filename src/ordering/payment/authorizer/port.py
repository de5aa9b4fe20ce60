"""Card authorizer port (abstract interface).

Card payments are the only method that settles during checkout. The
authorization itself sits behind this port so a real card gateway can
replace the stand-in adapters without touching the payment handlers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthorizationResult:
    """Result of a card authorization attempt."""

    approved: bool
    authorization_code: str | None = None
    decline_reason: str | None = None


class CardAuthorizer(ABC):
    """Abstract card authorization interface."""

    @abstractmethod
    def authorize(self, amount: int, card_last4: str | None, reference: str) -> AuthorizationResult:
        """Authorize a charge of ``amount`` for the order ``reference``."""
        ...
