"""Probabilistic card authorizer — stand-in for a real card gateway.

Approves a fixed share of authorizations at random (90% by default).
"""

import random
from uuid import uuid4

from ordering.payment.authorizer.port import AuthorizationResult, CardAuthorizer


class RandomCardAuthorizer(CardAuthorizer):
    def __init__(self, approval_rate: float = 0.9, rng: random.Random | None = None) -> None:
        if not 0.0 <= approval_rate <= 1.0:
            raise ValueError(f"approval_rate must be between 0 and 1, got {approval_rate}")
        self.approval_rate = approval_rate
        self._rng = rng or random.Random()

    def authorize(self, amount: int, card_last4: str | None, reference: str) -> AuthorizationResult:
        if self._rng.random() < self.approval_rate:
            return AuthorizationResult(approved=True, authorization_code=f"auth_{uuid4().hex[:12]}")
        return AuthorizationResult(approved=False, decline_reason="Payment failed. Please try again")
