"""Order aggregate (CQRS) — the order ledger.

An order is written once by the checkout pipeline after pricing and payment
succeed, then only moves forward through its status lifecycle. The one
exception is the checkout's own rollback: if stock cannot be committed right
after the order is written, the order is discarded (deleted).

State Machine:
    Processing → Confirmed → Shipping → Delivered
    Cancelled (from Processing, Confirmed, Shipping)

Transitions are forward-only but may skip steps, so an admin can force a
Processing order straight to Delivered.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import TransitionError
from ordering.order.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderDiscarded,
    OrderPlaced,
    OrderShipped,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PROCESSING = "Processing"
    CONFIRMED = "Confirmed"
    SHIPPING = "Shipping"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class CancellationActor(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"


# Forward sequence; a transition must move to a later position
_SEQUENCE = [
    OrderStatus.PROCESSING,
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPING,
    OrderStatus.DELIVERED,
]

_TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

_CANCELLABLE_STATES = {
    OrderStatus.PROCESSING,
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPING,
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current in _TERMINAL_STATES:
        return False
    if target == OrderStatus.CANCELLED:
        return current in _CANCELLABLE_STATES
    return _SEQUENCE.index(target) > _SEQUENCE.index(current)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order is delivered, captured at checkout and never changed."""

    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)


@ordering.value_object(part_of="Order")
class OrderPricing:
    """Price breakdown locked at checkout, in whole currency units."""

    subtotal = Integer(default=0)
    shipping_total = Integer(default=0)
    add_ons_total = Integer(default=0)
    total_price = Integer(default=0)


@ordering.value_object(part_of="Order")
class PaymentRecord:
    """Outcome returned by the payment handler. Immutable once recorded."""

    method = String(required=True, max_length=50)
    status = String(required=True, max_length=50)
    transaction_id = String(max_length=100)
    message = String(max_length=255)
    paid_at = DateTime()
    details = Text()  # JSON: method-specific payload


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=500)


@ordering.entity(part_of="Order")
class ShippingLine:
    """Per-item shipping metadata: the class a product shipped under and its fee."""

    product_id = Identifier(required=True)
    shipping_class = String(required=True, max_length=20)
    fee = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)


@ordering.entity(part_of="Order")
class OrderAddOn:
    kind = String(required=True, max_length=50)
    name = String(required=True, max_length=100)
    description = String(max_length=255)
    cost = Integer(required=True, min_value=0)


@ordering.entity(part_of="Order")
class NotificationEntry:
    """One channel's outcome for one notification event. Append-only."""

    event = String(required=True, max_length=50)
    channel = String(required=True, max_length=20)
    recipient = String(max_length=255)
    status = String(required=True, max_length=20)
    sent_at = DateTime()
    summary = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    customer_email = String(max_length=255)
    customer_name = String(max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PROCESSING.value)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(required=True, max_length=50)
    pricing = ValueObject(OrderPricing)
    add_ons = HasMany(OrderAddOn)
    payment_outcome = ValueObject(PaymentRecord)
    shipping_lines = HasMany(ShippingLine)
    notification_log = HasMany(NotificationEntry)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    confirmed_at = DateTime()
    shipped_at = DateTime()
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_is_sum_of_parts(self):
        if self.pricing is None:
            return
        expected = self.pricing.subtotal + self.pricing.shipping_total + self.pricing.add_ons_total
        if self.pricing.total_price != expected:
            raise ValidationError(
                {"pricing": [f"Total {self.pricing.total_price} does not match subtotal, shipping and add-ons"]}
            )

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_id,
        customer_id,
        items_data,
        shipping_address,
        pricing,
        add_ons_data,
        shipping_lines_data,
        payment_outcome,
        customer_email=None,
        customer_name=None,
    ):
        """Create an order from a priced, paid-for cart snapshot.

        Args:
            order_id: Identity generated before payment so handlers can
                reference it.
            items_data: List of dicts with product_id, name, unit_price,
                quantity, image.
            shipping_address: Dict with address, city, phone.
            pricing: Dict with subtotal, shipping_total, add_ons_total,
                total_price.
            add_ons_data: List of applied add-on dicts (kind, name,
                description, cost), in request order.
            shipping_lines_data: List of dicts with product_id,
                shipping_class, fee, quantity.
            payment_outcome: Dict produced by ``PaymentOutcome.to_dict()``.
        """
        now = datetime.now(UTC)
        paid_at = payment_outcome.get("paid_at")
        if isinstance(paid_at, str):
            paid_at = datetime.fromisoformat(paid_at)

        order = cls(
            id=order_id,
            customer_id=str(customer_id),
            customer_email=customer_email,
            customer_name=customer_name,
            status=OrderStatus.PROCESSING.value,
            items=[
                OrderItem(
                    product_id=str(item["product_id"]),
                    name=item["name"],
                    unit_price=item["unit_price"],
                    quantity=item["quantity"],
                    image=item.get("image"),
                )
                for item in items_data
            ],
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=payment_outcome["method"],
            pricing=OrderPricing(
                subtotal=pricing["subtotal"],
                shipping_total=pricing["shipping_total"],
                add_ons_total=pricing["add_ons_total"],
                total_price=pricing["total_price"],
            ),
            add_ons=[
                OrderAddOn(
                    kind=add_on["kind"],
                    name=add_on["name"],
                    description=add_on.get("description"),
                    cost=add_on["cost"],
                )
                for add_on in add_ons_data
            ],
            payment_outcome=PaymentRecord(
                method=payment_outcome["method"],
                status=payment_outcome["status"],
                transaction_id=payment_outcome.get("transaction_id"),
                message=payment_outcome.get("message"),
                paid_at=paid_at,
                details=json.dumps(payment_outcome.get("details") or {}),
            ),
            shipping_lines=[
                ShippingLine(
                    product_id=str(line["product_id"]),
                    shipping_class=line["shipping_class"],
                    fee=line["fee"],
                    quantity=line["quantity"],
                )
                for line in shipping_lines_data
            ],
            is_paid=paid_at is not None,
            paid_at=paid_at,
            is_delivered=False,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                item_count=order.item_count,
                total_price=order.total_price,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def total_price(self) -> int:
        return self.pricing.total_price if self.pricing else 0

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def quantities(self) -> dict[str, int]:
        """Ordered quantity per product id, summed across lines."""
        totals: dict[str, int] = {}
        for item in self.items:
            key = str(item.product_id)
            totals[key] = totals.get(key, 0) + item.quantity
        return totals

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status == OrderStatus.CANCELLED:
            if current == OrderStatus.DELIVERED:
                raise TransitionError(current.value, target_status.value, "Delivered orders cannot be cancelled")
            if current == OrderStatus.CANCELLED:
                raise TransitionError(current.value, target_status.value, "Order is already cancelled")
        if not can_transition(current, target_status):
            raise TransitionError(current.value, target_status.value)

    def ensure_can_cancel(self):
        """Raise TransitionError unless the order may still be cancelled."""
        self._assert_can_transition(OrderStatus.CANCELLED)

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def confirm(self):
        self._assert_can_transition(OrderStatus.CONFIRMED)
        now = datetime.now(UTC)
        self.status = OrderStatus.CONFIRMED.value
        self.confirmed_at = now
        self.updated_at = now
        self.raise_(OrderConfirmed(order_id=str(self.id), confirmed_at=now))

    def ship(self):
        self._assert_can_transition(OrderStatus.SHIPPING)
        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPING.value
        self.shipped_at = now
        self.updated_at = now
        self.raise_(OrderShipped(order_id=str(self.id), shipped_at=now))

    def deliver(self):
        """Mark delivered. Cash-on-delivery orders are paid at this point."""
        self._assert_can_transition(OrderStatus.DELIVERED)
        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.is_delivered = True
        self.delivered_at = now
        if not self.is_paid and self.payment_method == "COD":
            self.is_paid = True
            self.paid_at = now
        self.updated_at = now
        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    def cancel(self, reason, cancelled_by):
        """Mark cancelled. Stock is returned by the caller beforehand."""
        self._assert_can_transition(OrderStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                cancelled_by=cancelled_by,
                item_count=self.item_count,
                total_price=self.total_price,
                cancelled_at=now,
            )
        )

    def discard(self, reason):
        """Record the checkout rollback. Only a fresh Processing order can be discarded."""
        if OrderStatus(self.status) != OrderStatus.PROCESSING:
            raise TransitionError(self.status, "Discarded", "Only a Processing order can be discarded")
        self.raise_(
            OrderDiscarded(
                order_id=str(self.id),
                reason=reason,
                item_count=self.item_count,
                total_price=self.total_price,
                discarded_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # Notification log
    # -------------------------------------------------------------------
    def record_notifications(self, event, records):
        """Append one log entry per channel record (dicts from NotificationRecord.to_dict())."""
        for record in records:
            sent_at = record.get("sent_at")
            if isinstance(sent_at, str):
                sent_at = datetime.fromisoformat(sent_at)
            self.add_notification_log(
                NotificationEntry(
                    event=event,
                    channel=record["channel"],
                    recipient=record.get("recipient"),
                    status=record["status"],
                    sent_at=sent_at,
                    summary=record.get("summary"),
                )
            )
        self.updated_at = datetime.now(UTC)


_TRANSITIONS = {
    OrderStatus.CONFIRMED: Order.confirm,
    OrderStatus.SHIPPING: Order.ship,
    OrderStatus.DELIVERED: Order.deliver,
}


def advance(order: Order, target_status: OrderStatus):
    """Apply a forward (non-cancel) transition by target status."""
    if target_status not in _TRANSITIONS:
        raise TransitionError(order.status, target_status.value)
    _TRANSITIONS[target_status](order)
