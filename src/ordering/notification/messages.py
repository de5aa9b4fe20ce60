"""Notification events and the fixed message table for each channel."""

from dataclasses import dataclass
from enum import Enum


class NotificationEvent(Enum):
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    ORDER_SHIPPING = "ORDER_SHIPPING"
    ORDER_DELIVERED = "ORDER_DELIVERED"
    ORDER_CANCELLED = "ORDER_CANCELLED"


@dataclass(frozen=True)
class OrderNotice:
    """The order facts a notification is rendered from."""

    order_id: str
    customer_id: str
    status: str
    total_price: int
    customer_email: str | None = None
    customer_name: str | None = None
    phone: str | None = None
    shipping_address: str | None = None


@dataclass(frozen=True)
class MessageTemplate:
    subject: str
    headline: str
    sms: str
    push_title: str


MESSAGES = {
    NotificationEvent.ORDER_CREATED: MessageTemplate(
        subject="✅ Your order has been placed",
        headline="Your order was placed successfully and is being processed.",
        sms="SMART: Order #{order_id} placed. Total: {total}d",
        push_title="✅ Order placed",
    ),
    NotificationEvent.ORDER_CONFIRMED: MessageTemplate(
        subject="✓ Your order has been confirmed",
        headline="Your order is confirmed and we are preparing it.",
        sms="SMART: Order #{order_id} confirmed. Preparing your items.",
        push_title="✓ Order confirmed",
    ),
    NotificationEvent.ORDER_SHIPPING: MessageTemplate(
        subject="🚚 Your order is on its way",
        headline="Your order is on its way to you.",
        sms="SMART: Order #{order_id} is being delivered.",
        push_title="🚚 Out for delivery",
    ),
    NotificationEvent.ORDER_DELIVERED: MessageTemplate(
        subject="🎉 Your order has been delivered",
        headline="Your order was delivered. Thank you for shopping with us!",
        sms="SMART: Order #{order_id} delivered. Thank you!",
        push_title="🎉 Delivered",
    ),
    NotificationEvent.ORDER_CANCELLED: MessageTemplate(
        subject="❌ Your order has been cancelled",
        headline="Your order was cancelled. Contact us if you have any questions.",
        sms="SMART: Order #{order_id} cancelled.",
        push_title="❌ Order cancelled",
    ),
}


def _total(notice: OrderNotice) -> str:
    return f"{notice.total_price:,}"


def email_subject(event: NotificationEvent) -> str:
    return MESSAGES[event].subject


def email_body(notice: OrderNotice, event: NotificationEvent) -> str:
    lines = [
        f"Hello {notice.customer_name or 'valued customer'},",
        "",
        MESSAGES[event].headline,
        "",
        f"Order: #{notice.order_id}",
        f"Status: {notice.status}",
        f"Total: {_total(notice)}₫",
    ]
    if notice.shipping_address:
        lines.append(f"Address: {notice.shipping_address}")
    return "\n".join(lines)


def sms_text(notice: OrderNotice, event: NotificationEvent) -> str:
    return MESSAGES[event].sms.format(order_id=notice.order_id, total=_total(notice))


def push_title(event: NotificationEvent) -> str:
    return MESSAGES[event].push_title


def push_body(notice: OrderNotice) -> str:
    return f"Order #{notice.order_id} - {_total(notice)}₫"
