"""Notification dispatcher — concurrent fan-out of an order event to every channel.

Every channel is invoked in parallel and bounded by its own timeout. Each
channel yields exactly one ``NotificationRecord``; a channel that raises or
times out is recorded as ``failed`` and never fails the dispatch. Email is
recorded as ``skipped`` when no credentials are configured.
"""

import asyncio
import os
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from ordering.domain import ordering
from ordering.notification.channel import Channel, get_channel
from ordering.notification.messages import (
    NotificationEvent,
    OrderNotice,
    email_body,
    email_subject,
    push_body,
    push_title,
    sms_text,
)

logger = structlog.get_logger(__name__)

CHANNELS = (Channel.EMAIL, Channel.SMS, Channel.PUSH, Channel.DASHBOARD)

DEFAULT_CHANNEL_TIMEOUT = 5.0


@dataclass(frozen=True)
class NotificationRecord:
    channel: str
    status: str  # "sent" | "failed" | "skipped"
    recipient: str | None = None
    sent_at: datetime | None = None
    summary: str | None = None

    def to_dict(self) -> dict:
        return {
            "channel": self.channel,
            "status": self.status,
            "recipient": self.recipient,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "summary": self.summary,
        }


def _configured_timeout():
    custom = ordering.config.get("custom") or {}
    return custom.get("notification_channel_timeout")


def channel_timeout() -> float:
    """Per-channel timeout in seconds.

    NOTIFICATION_CHANNEL_TIMEOUT wins over ``[custom]
    notification_channel_timeout`` in domain.toml.
    """
    raw = os.environ.get("NOTIFICATION_CHANNEL_TIMEOUT") or _configured_timeout()
    if not raw:
        return DEFAULT_CHANNEL_TIMEOUT
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid notification channel timeout, using default", value=raw)
        return DEFAULT_CHANNEL_TIMEOUT


def email_configured() -> bool:
    user = os.environ.get("EMAIL_USER") or os.environ.get("EMAIL_USERNAME")
    password = os.environ.get("EMAIL_PASS") or os.environ.get("EMAIL_PASSWORD")
    return bool(user and password)


def recipient_for(channel: Channel, notice: OrderNotice) -> str | None:
    return {
        Channel.EMAIL: notice.customer_email,
        Channel.SMS: notice.phone,
        Channel.PUSH: notice.customer_id,
        Channel.DASHBOARD: "admin",
    }[channel]


def _from_result(channel: Channel, recipient: str | None, result: dict, summary: str) -> NotificationRecord:
    if result.get("status") == "sent":
        return NotificationRecord(
            channel=channel.value,
            status="sent",
            recipient=recipient,
            sent_at=datetime.now(UTC),
            summary=summary,
        )
    return NotificationRecord(
        channel=channel.value,
        status="failed",
        recipient=recipient,
        summary=result.get("error") or "Unknown dispatch error",
    )


async def _send_email(notice: OrderNotice, event: NotificationEvent) -> NotificationRecord:
    recipient = recipient_for(Channel.EMAIL, notice)
    if not email_configured():
        return NotificationRecord(
            channel=Channel.EMAIL.value,
            status="skipped",
            recipient=recipient,
            summary="Email not configured",
        )
    if not recipient:
        return NotificationRecord(
            channel=Channel.EMAIL.value,
            status="skipped",
            summary="No email address on file",
        )
    subject = email_subject(event)
    result = await get_channel(Channel.EMAIL).send(to=recipient, subject=subject, body=email_body(notice, event))
    return _from_result(Channel.EMAIL, recipient, result, subject)


async def _send_sms(notice: OrderNotice, event: NotificationEvent) -> NotificationRecord:
    recipient = recipient_for(Channel.SMS, notice)
    if not recipient:
        return NotificationRecord(channel=Channel.SMS.value, status="skipped", summary="No phone number on file")
    text = sms_text(notice, event)
    result = await get_channel(Channel.SMS).send(to=recipient, body=text)
    return _from_result(Channel.SMS, recipient, result, text)


async def _send_push(notice: OrderNotice, event: NotificationEvent) -> NotificationRecord:
    recipient = recipient_for(Channel.PUSH, notice)
    title = push_title(event)
    result = await get_channel(Channel.PUSH).send(user_id=recipient, title=title, body=push_body(notice))
    return _from_result(Channel.PUSH, recipient, result, title)


async def _send_dashboard(notice: OrderNotice, event: NotificationEvent) -> NotificationRecord:
    payload = {
        "order_id": notice.order_id,
        "customer_id": notice.customer_id,
        "status": notice.status,
        "total_price": notice.total_price,
    }
    result = await get_channel(Channel.DASHBOARD).publish(event=event.value, payload=payload)
    return _from_result(
        Channel.DASHBOARD, recipient_for(Channel.DASHBOARD, notice), result, f"{event.value} #{notice.order_id}"
    )


_SENDERS = {
    Channel.EMAIL: _send_email,
    Channel.SMS: _send_sms,
    Channel.PUSH: _send_push,
    Channel.DASHBOARD: _send_dashboard,
}


class NotificationDispatcher:
    def __init__(self, timeout: float | None = None):
        self.timeout = timeout if timeout is not None else channel_timeout()

    async def notify(self, notice: OrderNotice, event: NotificationEvent) -> list[NotificationRecord]:
        """Dispatch ``event`` on every channel. Returns one record per channel, never raises."""
        return list(await asyncio.gather(*(self._dispatch(channel, notice, event) for channel in CHANNELS)))

    async def _dispatch(self, channel: Channel, notice: OrderNotice, event: NotificationEvent) -> NotificationRecord:
        recipient = recipient_for(channel, notice)
        try:
            return await asyncio.wait_for(_SENDERS[channel](notice, event), timeout=self.timeout)
        except TimeoutError:
            logger.warning(
                "Notification channel timed out",
                channel=channel.value,
                order_id=notice.order_id,
                notification_event=event.value,
                timeout=self.timeout,
            )
            return NotificationRecord(
                channel=channel.value,
                status="failed",
                recipient=recipient,
                summary=f"timed out after {self.timeout:g}s",
            )
        except Exception as e:
            logger.error(
                "Notification dispatch failed",
                channel=channel.value,
                order_id=notice.order_id,
                notification_event=event.value,
                error=str(e),
            )
            return NotificationRecord(channel=channel.value, status="failed", recipient=recipient, summary=str(e))
