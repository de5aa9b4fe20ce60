"""FastAPI routes for the Ordering domain — orders and the customer cart."""

import json
import os

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from ordering.api.dependencies import current_identity
from ordering.api.schemas import (
    AddOnResponse,
    AddToCartRequest,
    CardAuthorizerConfigResponse,
    CartLineResponse,
    CartResponse,
    CheckoutBreakdown,
    CheckoutResponse,
    ConfigureCardAuthorizerRequest,
    CreateOrderRequest,
    NotificationResponse,
    OrderItemResponse,
    OrderResponse,
    PaymentMethodsResponse,
    PaymentResponse,
    PricingResponse,
    ShippingAddressSchema,
    ShippingLineResponse,
    StatusResponse,
    TransitionResponse,
    UpdateCartQuantityRequest,
    UpdateStatusRequest,
)
from ordering.auth.port import Identity
from ordering.cart.cart import cart_for
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from ordering.checkout.lifecycle import OrderLifecycle
from ordering.errors import AuthorizationError
from ordering.payment.authorizer import get_card_authorizer
from ordering.payment.authorizer.fake_adapter import FakeCardAuthorizer
from ordering.payment.catalog import default_method, payment_methods
from ordering.projections.checkout_stats import stats_summary


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def _notification_response(entry) -> NotificationResponse:
    if isinstance(entry, dict):
        return NotificationResponse(**entry)
    return NotificationResponse(
        event=getattr(entry, "event", None),
        channel=entry.channel,
        status=entry.status,
        recipient=entry.recipient,
        sent_at=entry.sent_at,
        summary=entry.summary,
    )


def order_response(order) -> OrderResponse:
    address = order.shipping_address
    payment = order.payment_outcome
    return OrderResponse(
        id=str(order.id),
        customer_id=str(order.customer_id),
        status=order.status,
        items=[
            OrderItemResponse(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                image=item.image,
            )
            for item in order.items
        ],
        shipping_address=ShippingAddressSchema(address=address.address, city=address.city, phone=address.phone),
        payment_method=order.payment_method,
        total_price=order.total_price,
        pricing=PricingResponse(
            subtotal=order.pricing.subtotal,
            shipping_total=order.pricing.shipping_total,
            add_ons_total=order.pricing.add_ons_total,
            total_price=order.pricing.total_price,
        ),
        add_ons=[
            AddOnResponse(kind=add_on.kind, name=add_on.name, description=add_on.description, cost=add_on.cost)
            for add_on in order.add_ons
        ],
        payment=PaymentResponse(
            method=payment.method,
            status=payment.status,
            transaction_id=payment.transaction_id,
            message=payment.message,
            paid_at=payment.paid_at,
            details=json.loads(payment.details) if payment.details else {},
        ),
        shipping_lines=[
            ShippingLineResponse(
                product_id=str(line.product_id),
                shipping_class=line.shipping_class,
                fee=line.fee,
                quantity=line.quantity,
            )
            for line in order.shipping_lines
        ],
        is_paid=bool(order.is_paid),
        paid_at=order.paid_at,
        is_delivered=bool(order.is_delivered),
        delivered_at=order.delivered_at,
        cancellation_reason=order.cancellation_reason,
        cancelled_by=order.cancelled_by,
        notification_log=[_notification_response(entry) for entry in order.notification_log],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _transition_response(result) -> TransitionResponse:
    return TransitionResponse(
        order=order_response(result.order),
        notifications=[_notification_response(record.to_dict()) for record in result.notifications],
    )


def _cart_response(customer_id) -> CartResponse:
    lines = cart_for(customer_id).snapshot()
    return CartResponse(
        customer_id=str(customer_id),
        items=[CartLineResponse(**line.to_dict()) for line in lines],
        total_items=sum(line.quantity for line in lines),
        subtotal=sum(line.line_total for line in lines),
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=CheckoutResponse)
async def create_order(body: CreateOrderRequest, identity: Identity = Depends(current_identity)) -> CheckoutResponse:
    """Check out the caller's cart."""
    result = await OrderLifecycle().create_order(
        identity,
        shipping_address=body.shipping_address.model_dump(),
        payment_method=body.payment_method,
        add_ons=[add_on.model_dump() for add_on in body.add_ons],
        payment_info=body.payment_info.model_dump(exclude_none=True),
    )
    return CheckoutResponse(
        order=order_response(result.order),
        breakdown=CheckoutBreakdown(
            pricing=result.pricing.to_dict(),
            payment=result.payment.to_dict(),
            notifications=[_notification_response(record.to_dict()) for record in result.notifications],
        ),
    )


@order_router.get("/mine", response_model=list[OrderResponse])
async def my_orders(identity: Identity = Depends(current_identity)) -> list[OrderResponse]:
    return [order_response(order) for order in OrderLifecycle().list_orders_for(identity)]


@order_router.get("", response_model=list[OrderResponse])
async def all_orders(identity: Identity = Depends(current_identity)) -> list[OrderResponse]:
    return [order_response(order) for order in OrderLifecycle().list_all_orders(identity)]


@order_router.get("/payment-methods", response_model=PaymentMethodsResponse)
async def list_payment_methods() -> PaymentMethodsResponse:
    return PaymentMethodsResponse(methods=payment_methods(), default=default_method())


@order_router.get("/cart-stats")
async def checkout_stats(identity: Identity = Depends(current_identity)) -> dict:
    """Advisory checkout counters (admin only)."""
    if not identity.is_admin:
        raise AuthorizationError("Only admins can view checkout statistics")
    return stats_summary()


@order_router.post("/card-authorizer/configure", response_model=CardAuthorizerConfigResponse)
async def configure_card_authorizer(body: ConfigureCardAuthorizerRequest) -> CardAuthorizerConfigResponse:
    """Configure the FakeCardAuthorizer behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Card authorizer configuration not available in production")

    authorizer = get_card_authorizer()
    if not isinstance(authorizer, FakeCardAuthorizer):
        raise HTTPException(status_code=400, detail="Card authorizer configuration only available for FakeCardAuthorizer")

    authorizer.configure(should_approve=body.should_approve, decline_reason=body.decline_reason)
    return CardAuthorizerConfigResponse(
        authorizer=type(authorizer).__name__,
        should_approve=authorizer.should_approve,
        decline_reason=authorizer.decline_reason,
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, identity: Identity = Depends(current_identity)) -> OrderResponse:
    return order_response(OrderLifecycle().get_order(identity, order_id))


@order_router.put("/{order_id}/status", response_model=TransitionResponse)
async def update_order_status(
    order_id: str,
    body: UpdateStatusRequest,
    identity: Identity = Depends(current_identity),
) -> TransitionResponse:
    result = await OrderLifecycle().transition_status(identity, order_id, body.status)
    return _transition_response(result)


@order_router.put("/{order_id}/deliver", response_model=TransitionResponse)
async def deliver_order(order_id: str, identity: Identity = Depends(current_identity)) -> TransitionResponse:
    result = await OrderLifecycle().deliver(identity, order_id)
    return _transition_response(result)


@order_router.delete("/{order_id}", response_model=TransitionResponse)
async def cancel_order(
    order_id: str,
    reason: str | None = None,
    identity: Identity = Depends(current_identity),
) -> TransitionResponse:
    result = await OrderLifecycle().cancel_order(identity, order_id, reason=reason)
    return _transition_response(result)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(identity: Identity = Depends(current_identity)) -> CartResponse:
    return _cart_response(identity.customer_id)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, identity: Identity = Depends(current_identity)) -> CartResponse:
    command = AddToCart(
        customer_id=identity.customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(identity.customer_id)


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    body: UpdateCartQuantityRequest,
    identity: Identity = Depends(current_identity),
) -> CartResponse:
    command = UpdateCartQuantity(
        customer_id=identity.customer_id,
        product_id=product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(identity.customer_id)


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, identity: Identity = Depends(current_identity)) -> CartResponse:
    command = RemoveFromCart(customer_id=identity.customer_id, product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return _cart_response(identity.customer_id)


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(identity: Identity = Depends(current_identity)) -> StatusResponse:
    current_domain.process(ClearCart(customer_id=identity.customer_id), asynchronous=False)
    return StatusResponse(status="cleared")
