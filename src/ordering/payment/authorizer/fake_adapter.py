"""Configurable fake card authorizer for development and testing.

Approves or declines deterministically, as configured, and records every
call so tests can assert on what was authorized.
"""

from uuid import uuid4

from ordering.payment.authorizer.port import AuthorizationResult, CardAuthorizer


class FakeCardAuthorizer(CardAuthorizer):
    """Deterministic card authorizer."""

    def __init__(self) -> None:
        self.should_approve: bool = True
        self.decline_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_approve: bool, decline_reason: str = "Card declined") -> None:
        """Configure authorizer behavior at runtime."""
        self.should_approve = should_approve
        self.decline_reason = decline_reason

    def authorize(self, amount: int, card_last4: str | None, reference: str) -> AuthorizationResult:
        self.calls.append({"amount": amount, "card_last4": card_last4, "reference": reference})

        if self.should_approve:
            return AuthorizationResult(approved=True, authorization_code=f"fake_auth_{uuid4().hex[:12]}")
        return AuthorizationResult(approved=False, decline_reason=self.decline_reason)
