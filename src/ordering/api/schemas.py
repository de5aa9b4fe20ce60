"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), kept separate from
internal Protean commands. Request fields accept both snake_case and the
camelCase names the storefront client sends.
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    address: str = ""
    city: str = ""
    phone: str = ""


class AddOnRequestSchema(BaseModel):
    type: str
    enabled: bool = False


class PaymentInfoSchema(BaseModel):
    transfer_code: str | None = Field(default=None, validation_alias=_alias("transfer_code", "transferCode"))
    card_number: str | None = Field(default=None, validation_alias=_alias("card_number", "cardNumber"))
    cvv: str | None = None
    expiry_date: str | None = Field(default=None, validation_alias=_alias("expiry_date", "expiryDate"))


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    shipping_address: ShippingAddressSchema = Field(
        default_factory=ShippingAddressSchema,
        validation_alias=_alias("shipping_address", "shippingAddress"),
    )
    payment_method: str | None = Field(default=None, validation_alias=_alias("payment_method", "paymentMethod"))
    add_ons: list[AddOnRequestSchema] = Field(default_factory=list, validation_alias=_alias("add_ons", "addOns"))
    payment_info: PaymentInfoSchema = Field(
        default_factory=PaymentInfoSchema,
        validation_alias=_alias("payment_info", "paymentInfo"),
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "address": "12 Trang Tien",
                        "city": "Ha Noi",
                        "phone": "0901234567",
                    },
                    "payment_method": "COD",
                    "add_ons": [{"type": "giftWrap", "enabled": True}],
                    "payment_info": {},
                }
            ]
        }
    }


class UpdateStatusRequest(BaseModel):
    status: str = Field(validation_alias=_alias("status", "orderStatus"))


class ConfigureCardAuthorizerRequest(BaseModel):
    should_approve: bool = True
    decline_reason: str = "Card declined"


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str = Field(validation_alias=_alias("product_id", "productId"))
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    unit_price: int
    quantity: int
    image: str | None = None


class ShippingLineResponse(BaseModel):
    product_id: str
    shipping_class: str
    fee: int
    quantity: int


class AddOnResponse(BaseModel):
    kind: str
    name: str
    description: str | None = None
    cost: int


class PricingResponse(BaseModel):
    subtotal: int
    shipping_total: int
    add_ons_total: int
    total_price: int


class PaymentResponse(BaseModel):
    method: str
    status: str
    transaction_id: str | None = None
    message: str | None = None
    paid_at: datetime | None = None
    details: dict = Field(default_factory=dict)


class NotificationResponse(BaseModel):
    event: str | None = None
    channel: str
    status: str
    recipient: str | None = None
    sent_at: datetime | None = None
    summary: str | None = None


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    status: str
    items: list[OrderItemResponse]
    shipping_address: ShippingAddressSchema
    payment_method: str
    total_price: int
    pricing: PricingResponse
    add_ons: list[AddOnResponse]
    payment: PaymentResponse
    shipping_lines: list[ShippingLineResponse]
    is_paid: bool
    paid_at: datetime | None = None
    is_delivered: bool
    delivered_at: datetime | None = None
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    notification_log: list[NotificationResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CheckoutBreakdown(BaseModel):
    pricing: dict
    payment: dict
    notifications: list[NotificationResponse]


class CheckoutResponse(BaseModel):
    order: OrderResponse
    breakdown: CheckoutBreakdown


class TransitionResponse(BaseModel):
    order: OrderResponse
    notifications: list[NotificationResponse]


class PaymentMethodsResponse(BaseModel):
    methods: list[dict]
    default: str


class CartLineResponse(BaseModel):
    product_id: str
    name: str
    unit_price: int
    quantity: int
    image: str | None = None


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartLineResponse]
    total_items: int
    subtotal: int


class CardAuthorizerConfigResponse(BaseModel):
    authorizer: str
    should_approve: bool
    decline_reason: str


class StatusResponse(BaseModel):
    status: str = "ok"
