"""Fake SMS adapter — records sent messages for testing."""

from ordering.notification.channel.fake_base import FakeChannelMixin
from ordering.notification.channel.sms_port import SMSPort


class FakeSMSAdapter(FakeChannelMixin, SMSPort):
    prefix = "sms"
    default_failure_reason = "SMS delivery failed"

    async def send(self, to: str, body: str) -> dict:
        return await self._deliver({"to": to, "body": body})
