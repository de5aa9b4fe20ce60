"""Shared behavior for the in-memory fake channel adapters."""

import asyncio
from uuid import uuid4


class FakeChannelMixin:
    """Records deliveries in memory; can be configured to fail or to be slow."""

    prefix = "msg"
    default_failure_reason = "Delivery failed"

    def __init__(self):
        self.sent_messages: list[dict] = []
        self.should_succeed = True
        self.failure_reason = self.default_failure_reason
        self.delay: float = 0.0
        self.raise_error: Exception | None = None

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str | None = None,
        delay: float = 0.0,
        raise_error: Exception | None = None,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason or self.default_failure_reason
        self.delay = delay
        self.raise_error = raise_error

    async def _deliver(self, record: dict) -> dict:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raise_error is not None:
            raise self.raise_error
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"{self.prefix}-{uuid4().hex[:12]}"
        self.sent_messages.append({"message_id": message_id, **record})
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        """Clear sent messages and restore default behavior."""
        self.sent_messages.clear()
        self.should_succeed = True
        self.failure_reason = self.default_failure_reason
        self.delay = 0.0
        self.raise_error = None
