"""Fake push adapter — records sent push notifications for testing."""

from ordering.notification.channel.fake_base import FakeChannelMixin
from ordering.notification.channel.push_port import PushPort


class FakePushAdapter(FakeChannelMixin, PushPort):
    prefix = "push"
    default_failure_reason = "Push delivery failed"

    async def send(self, user_id: str, title: str, body: str) -> dict:
        return await self._deliver({"user_id": user_id, "title": title, "body": body})
