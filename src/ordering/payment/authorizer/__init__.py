"""Card authorizer factory.

Provides get_card_authorizer() / set_card_authorizer() to swap
implementations. The default comes from PAYMENT_CARD_AUTHORIZER:
- "random" (default): RandomCardAuthorizer, approves 90% of charges
- "fake": FakeCardAuthorizer, deterministic and configurable
"""

import os

from ordering.payment.authorizer.port import CardAuthorizer

_current_authorizer: CardAuthorizer | None = None


def get_card_authorizer() -> CardAuthorizer:
    """Return the current card authorizer, creating the configured default."""
    global _current_authorizer
    if _current_authorizer is None:
        adapter = os.environ.get("PAYMENT_CARD_AUTHORIZER", "random")
        if adapter == "random":
            from ordering.payment.authorizer.random_adapter import RandomCardAuthorizer

            _current_authorizer = RandomCardAuthorizer()
        elif adapter == "fake":
            from ordering.payment.authorizer.fake_adapter import FakeCardAuthorizer

            _current_authorizer = FakeCardAuthorizer()
        else:
            raise ValueError(f"Unknown card authorizer: {adapter}")
    return _current_authorizer


def set_card_authorizer(authorizer: CardAuthorizer) -> None:
    """Override the active card authorizer (useful for tests)."""
    global _current_authorizer
    _current_authorizer = authorizer


def reset_card_authorizer() -> None:
    """Reset to the configured default."""
    global _current_authorizer
    _current_authorizer = None
