"""Fake dashboard adapter — keeps the admin feed in memory."""

from ordering.notification.channel.dashboard_port import DashboardPort
from ordering.notification.channel.fake_base import FakeChannelMixin


class FakeDashboardAdapter(FakeChannelMixin, DashboardPort):
    prefix = "dash"
    default_failure_reason = "Dashboard feed unavailable"

    async def publish(self, event: str, payload: dict) -> dict:
        return await self._deliver({"event": event, "payload": payload})
