"""Fake email adapter — records sent emails for testing."""

from ordering.notification.channel.email_port import EmailPort
from ordering.notification.channel.fake_base import FakeChannelMixin


class FakeEmailAdapter(FakeChannelMixin, EmailPort):
    prefix = "email"
    default_failure_reason = "Email delivery failed"

    async def send(self, to: str, subject: str, body: str) -> dict:
        return await self._deliver({"to": to, "subject": subject, "body": body})
