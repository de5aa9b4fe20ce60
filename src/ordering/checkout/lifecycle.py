"""Order lifecycle controller — checkout and status transitions.

Checkout runs strictly in this order:

    1. snapshot the customer's cart (rejected if empty)
    2. load every product and pre-check stock
    3. price the cart: subtotal, per-item shipping, add-ons
    4. select the payment handler and validate the payment info
    5. process the payment (a failure aborts with nothing written)
    6. persist the order as Processing
    7. commit inventory; on any failure the order is discarded
    8. dispatch ORDER_CREATED and clear the cart
    9. return the order with its pricing, payment and notification outcomes

Status transitions are admin-only apart from cancellation, which the owner
may also request. Cancelling returns stock before the status is recorded.
Every transition dispatches its notification and appends the results to
the order's notification log.
"""

import json
from dataclasses import dataclass, field
from uuid import uuid4

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.auth.port import Identity
from ordering.cart.cart import cart_for
from ordering.cart.items import ClearCart
from ordering.catalogue.product import CatalogLookup
from ordering.errors import AuthorizationError, NotFoundError, PaymentRejectedError
from ordering.inventory.locks import order_locks
from ordering.inventory.stock import commit_inventory, precheck, restock
from ordering.notification.dispatcher import NotificationDispatcher, NotificationRecord
from ordering.notification.messages import NotificationEvent, OrderNotice
from ordering.order.notification_log import RecordNotifications
from ordering.order.order import CancellationActor, Order, OrderStatus
from ordering.order.placement import DiscardOrder, PlaceOrder
from ordering.order.transitions import AdvanceOrderStatus, CancelOrder
from ordering.payment.handlers import PaymentContext, PaymentOutcome, select
from ordering.pricing.breakdown import PriceBreakdown, price_cart

logger = structlog.get_logger(__name__)

_ADDRESS_FIELDS = ("address", "city", "phone")
_PAGE_SIZE = 100

_STATUS_EVENTS = {
    OrderStatus.CONFIRMED: NotificationEvent.ORDER_CONFIRMED,
    OrderStatus.SHIPPING: NotificationEvent.ORDER_SHIPPING,
    OrderStatus.DELIVERED: NotificationEvent.ORDER_DELIVERED,
    OrderStatus.CANCELLED: NotificationEvent.ORDER_CANCELLED,
}


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    pricing: PriceBreakdown
    payment: PaymentOutcome
    notifications: list[NotificationRecord] = field(default_factory=list)


@dataclass(frozen=True)
class TransitionResult:
    order: Order
    notifications: list[NotificationRecord] = field(default_factory=list)


def parse_status(value: str) -> OrderStatus:
    """Match a requested status by value, case-insensitively."""
    for status in OrderStatus:
        if status.value.lower() == str(value or "").strip().lower():
            return status
    raise ValidationError({"status": [f"Unknown order status: {value}"]})


def _require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise AuthorizationError("Not authorized, no token", authenticated=False)
    return identity


def _require_admin(identity: Identity | None, action: str) -> Identity:
    identity = _require_identity(identity)
    if not identity.is_admin:
        raise AuthorizationError(f"Only admins can {action}")
    return identity


def _validate_address(shipping_address: dict | None) -> dict:
    shipping_address = shipping_address or {}
    missing = [name for name in _ADDRESS_FIELDS if not str(shipping_address.get(name) or "").strip()]
    if missing:
        raise ValidationError({f"shipping_address.{name}": ["This field is required"] for name in missing})
    return {name: str(shipping_address[name]).strip() for name in _ADDRESS_FIELDS}


def _newest_first(**filters) -> list[Order]:
    """Every matching order, newest first, read page by page."""
    query = current_domain.repository_for(Order)._dao.query.order_by("-created_at")
    if filters:
        query = query.filter(**filters)

    orders: list[Order] = []
    while True:
        page = query.offset(len(orders)).limit(_PAGE_SIZE).all().items
        orders.extend(page)
        if len(page) < _PAGE_SIZE:
            return orders


def _notice(order: Order) -> OrderNotice:
    address = order.shipping_address
    return OrderNotice(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        status=order.status,
        total_price=order.total_price,
        customer_email=order.customer_email,
        customer_name=order.customer_name,
        phone=address.phone if address else None,
        shipping_address=f"{address.address}, {address.city}" if address else None,
    )


class OrderLifecycle:
    def __init__(self, catalog: CatalogLookup | None = None, dispatcher: NotificationDispatcher | None = None):
        self.catalog = catalog or CatalogLookup()
        self.dispatcher = dispatcher or NotificationDispatcher()

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def _load(self, order_id) -> Order:
        try:
            return current_domain.repository_for(Order).get(str(order_id))
        except ObjectNotFoundError as exc:
            raise NotFoundError("Order", str(order_id)) from exc

    def get_order(self, identity: Identity | None, order_id) -> Order:
        identity = _require_identity(identity)
        order = self._load(order_id)
        if not identity.can_access(order.customer_id):
            raise AuthorizationError("Not authorized to view this order")
        return order

    def list_orders_for(self, identity: Identity | None) -> list[Order]:
        identity = _require_identity(identity)
        return _newest_first(customer_id=identity.customer_id)

    def list_all_orders(self, identity: Identity | None) -> list[Order]:
        _require_admin(identity, "list all orders")
        return _newest_first()

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    async def create_order(
        self,
        identity: Identity | None,
        shipping_address: dict | None,
        payment_method: str | None,
        add_ons: list[dict] | None = None,
        payment_info: dict | None = None,
    ) -> CheckoutResult:
        identity = _require_identity(identity)
        address = _validate_address(shipping_address)
        log = logger.bind(customer_id=identity.customer_id)

        lines = cart_for(identity.customer_id).snapshot()
        if not lines:
            raise ValidationError({"cart": ["Your cart is empty"]})
        log.info("Checkout started", lines=len(lines))

        products = self.catalog.get_many(line.product_id for line in lines)
        precheck(lines, products)

        breakdown = price_cart(lines, products, add_ons)

        handler = select(payment_method)
        validation = handler.validate(payment_info)
        if not validation.valid:
            log.info("Payment info rejected", method=handler.method.value, reason=validation.message)
            raise PaymentRejectedError(handler.method.value, validation.message)

        order_id = str(uuid4())
        outcome = handler.process(
            breakdown.total_price,
            PaymentContext(order_reference=order_id, customer_id=identity.customer_id, payment_info=payment_info or {}),
        )
        if not outcome.success:
            log.info("Payment declined", method=outcome.method, reason=outcome.message)
            raise PaymentRejectedError(outcome.method, outcome.message)

        current_domain.process(
            PlaceOrder(
                order_id=order_id,
                customer_id=identity.customer_id,
                customer_email=identity.email,
                customer_name=identity.name,
                items=json.dumps([line.to_dict() for line in lines]),
                shipping_address=json.dumps(address),
                subtotal=breakdown.subtotal,
                shipping_total=breakdown.shipping_total,
                add_ons_total=breakdown.add_ons_total,
                total_price=breakdown.total_price,
                add_ons=json.dumps([add_on.to_dict() for add_on in breakdown.add_ons]),
                shipping_lines=json.dumps([line.to_dict() for line in breakdown.shipping_lines]),
                payment_outcome=json.dumps(outcome.to_dict()),
            ),
            asynchronous=False,
        )

        try:
            commit_inventory(self._load(order_id))
        except Exception as exc:
            log.warning("Rolling back order after failed stock commit", order_id=order_id, error=str(exc))
            current_domain.process(
                DiscardOrder(order_id=order_id, reason=f"Stock commit failed: {exc}"),
                asynchronous=False,
            )
            raise

        notifications = await self._notify(self._load(order_id), NotificationEvent.ORDER_CREATED)
        current_domain.process(ClearCart(customer_id=identity.customer_id), asynchronous=False)

        log.info("Checkout succeeded", order_id=order_id, total_price=breakdown.total_price)
        return CheckoutResult(
            order=self._load(order_id),
            pricing=breakdown,
            payment=outcome,
            notifications=notifications,
        )

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    async def transition_status(self, identity: Identity | None, order_id, requested_status) -> TransitionResult:
        identity = _require_admin(identity, "change order status")
        target = requested_status if isinstance(requested_status, OrderStatus) else parse_status(requested_status)
        if target == OrderStatus.CANCELLED:
            return await self.cancel_order(identity, order_id, reason="Cancelled by admin")

        with order_locks.hold([order_id]):
            self._load(order_id)
            current_domain.process(
                AdvanceOrderStatus(order_id=str(order_id), status=target.value),
                asynchronous=False,
            )

        logger.info("Order status changed", order_id=str(order_id), status=target.value)
        notifications = await self._notify(self._load(order_id), _STATUS_EVENTS[target])
        return TransitionResult(order=self._load(order_id), notifications=notifications)

    async def deliver(self, identity: Identity | None, order_id) -> TransitionResult:
        return await self.transition_status(identity, order_id, OrderStatus.DELIVERED)

    async def cancel_order(self, identity: Identity | None, order_id, reason: str | None = None) -> TransitionResult:
        identity = _require_identity(identity)
        with order_locks.hold([order_id]):
            order = self._load(order_id)
            if not identity.can_access(order.customer_id):
                raise AuthorizationError("Not authorized to cancel this order")
            order.ensure_can_cancel()

            restock(order)
            is_owner = str(order.customer_id) == identity.customer_id
            actor = CancellationActor.CUSTOMER if is_owner else CancellationActor.ADMIN
            current_domain.process(
                CancelOrder(
                    order_id=str(order.id),
                    reason=reason or f"Cancelled by {actor.value.lower()}",
                    cancelled_by=actor.value,
                ),
                asynchronous=False,
            )

        logger.info("Order cancelled", order_id=str(order_id), cancelled_by=actor.value)
        notifications = await self._notify(self._load(order_id), NotificationEvent.ORDER_CANCELLED)
        return TransitionResult(order=self._load(order_id), notifications=notifications)

    # -------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------
    async def _notify(self, order: Order, event: NotificationEvent) -> list[NotificationRecord]:
        records = await self.dispatcher.notify(_notice(order), event)
        current_domain.process(
            RecordNotifications(
                order_id=str(order.id),
                event=event.value,
                records=json.dumps([record.to_dict() for record in records]),
            ),
            asynchronous=False,
        )
        return records
