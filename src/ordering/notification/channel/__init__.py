"""Channel adapter registry — pluggable notification dispatch channels.

Provides singleton access to channel adapters. Uses in-memory fake adapters
by default; real transports can be installed with set_channel().
"""

from enum import Enum


class Channel(Enum):
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    DASHBOARD = "dashboard"


_channel_instances: dict[Channel, object] = {}


def get_channel(channel: Channel):
    """Return the configured adapter for a channel (singleton per channel)."""
    if channel not in _channel_instances:
        if channel == Channel.EMAIL:
            from ordering.notification.channel.fake_email import FakeEmailAdapter

            _channel_instances[channel] = FakeEmailAdapter()
        elif channel == Channel.SMS:
            from ordering.notification.channel.fake_sms import FakeSMSAdapter

            _channel_instances[channel] = FakeSMSAdapter()
        elif channel == Channel.PUSH:
            from ordering.notification.channel.fake_push import FakePushAdapter

            _channel_instances[channel] = FakePushAdapter()
        elif channel == Channel.DASHBOARD:
            from ordering.notification.channel.fake_dashboard import FakeDashboardAdapter

            _channel_instances[channel] = FakeDashboardAdapter()
        else:
            raise ValueError(f"Unknown channel: {channel}")

    return _channel_instances[channel]


def set_channel(channel: Channel, adapter) -> None:
    """Install an adapter for a channel."""
    _channel_instances[channel] = adapter


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
