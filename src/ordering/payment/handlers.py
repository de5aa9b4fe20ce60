"""Payment handler selection — validate and process by payment method.

Each supported method is a ``PaymentMethod`` variant; ``select`` resolves a
requested method name (case-insensitive, with aliases) to a handler and
falls back to cash on delivery for anything it does not recognize.

Handlers never raise for a declined payment. ``process`` returns a
``PaymentOutcome`` with ``success=False`` and the caller decides to abort.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from time import time_ns
from urllib.parse import quote

import structlog

from ordering.payment.authorizer import get_card_authorizer

logger = structlog.get_logger(__name__)


class PaymentMethod(Enum):
    COD = "COD"
    BANK_TRANSFER = "BANK_TRANSFER"
    CREDIT_CARD = "CREDIT_CARD"
    MOMO = "MOMO"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    WAITING_CONFIRMATION = "WAITING_CONFIRMATION"
    WAITING_PAYMENT = "WAITING_PAYMENT"
    PAID = "PAID"
    FAILED = "FAILED"


_ALIASES = {
    "COD": PaymentMethod.COD,
    "BANK": PaymentMethod.BANK_TRANSFER,
    "BANK_TRANSFER": PaymentMethod.BANK_TRANSFER,
    "CREDIT_CARD": PaymentMethod.CREDIT_CARD,
    "CARD": PaymentMethod.CREDIT_CARD,
    "MOMO": PaymentMethod.MOMO,
}

DEFAULT_METHOD = PaymentMethod.COD

BANK_INFO = {
    "bank_name": "Vietcombank",
    "account_number": "1234567890",
    "account_name": "CONG TY SMART",
    "branch": "Chi nhánh Hà Nội",
}


@dataclass(frozen=True)
class PaymentValidation:
    valid: bool
    message: str


@dataclass(frozen=True)
class PaymentContext:
    order_reference: str
    customer_id: str | None = None
    payment_info: dict = field(default_factory=dict)


@dataclass(frozen=True)
class PaymentOutcome:
    method: str
    amount: int
    status: str
    success: bool
    message: str
    transaction_id: str | None = None
    paid_at: datetime | None = None
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "amount": self.amount,
            "status": self.status,
            "success": self.success,
            "message": self.message,
            "transaction_id": self.transaction_id,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
            "details": dict(self.details),
        }


def _transaction_id(prefix: str) -> str:
    return f"{prefix}_{time_ns() // 1_000_000}"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def _digits(value) -> str:
    return "".join(ch for ch in str(value or "") if ch.isdigit())


def _validate_cod(payment_info: dict) -> PaymentValidation:
    return PaymentValidation(valid=True, message="Cash on delivery, no prior verification needed")


def _validate_bank_transfer(payment_info: dict) -> PaymentValidation:
    if not payment_info.get("transfer_code"):
        return PaymentValidation(valid=False, message="A bank transfer reference code is required")
    return PaymentValidation(valid=True, message="Transfer details accepted, please follow the transfer instructions")


def _validate_credit_card(payment_info: dict) -> PaymentValidation:
    card_number = payment_info.get("card_number")
    cvv = payment_info.get("cvv")
    expiry_date = payment_info.get("expiry_date")
    if not card_number or not cvv or not expiry_date:
        return PaymentValidation(valid=False, message="Card number, CVV and expiry date are all required")
    if len(_digits(card_number)) < 16:
        return PaymentValidation(valid=False, message="Card number must have at least 16 digits")
    if len(_digits(cvv)) < 3:
        return PaymentValidation(valid=False, message="CVV must have at least 3 digits")
    return PaymentValidation(valid=True, message="Card details are valid")


def _validate_momo(payment_info: dict) -> PaymentValidation:
    return PaymentValidation(valid=True, message="Scan the QR code or open the MoMo app to pay")


# ---------------------------------------------------------------------------
# Processing
# ---------------------------------------------------------------------------
def _process_cod(amount: int, context: PaymentContext) -> PaymentOutcome:
    return PaymentOutcome(
        method=PaymentMethod.COD.value,
        amount=amount,
        status=PaymentStatus.PENDING.value,
        success=True,
        message="Pay on delivery",
        transaction_id=_transaction_id("COD"),
    )


def _process_bank_transfer(amount: int, context: PaymentContext) -> PaymentOutcome:
    return PaymentOutcome(
        method=PaymentMethod.BANK_TRANSFER.value,
        amount=amount,
        status=PaymentStatus.WAITING_CONFIRMATION.value,
        success=True,
        message="Awaiting transfer confirmation",
        transaction_id=_transaction_id("BANK"),
        details={
            "bank_info": dict(BANK_INFO),
            "transfer_content": f"SMART {context.order_reference}",
            "transfer_code": context.payment_info.get("transfer_code"),
        },
    )


def _process_credit_card(amount: int, context: PaymentContext) -> PaymentOutcome:
    card_digits = _digits(context.payment_info.get("card_number"))
    result = get_card_authorizer().authorize(
        amount=amount,
        card_last4=card_digits[-4:] or None,
        reference=context.order_reference,
    )
    if result.approved:
        return PaymentOutcome(
            method=PaymentMethod.CREDIT_CARD.value,
            amount=amount,
            status=PaymentStatus.PAID.value,
            success=True,
            message="Card payment succeeded",
            transaction_id=_transaction_id("CC"),
            paid_at=datetime.now(UTC),
            details={"authorization_code": result.authorization_code},
        )
    return PaymentOutcome(
        method=PaymentMethod.CREDIT_CARD.value,
        amount=amount,
        status=PaymentStatus.FAILED.value,
        success=False,
        message=result.decline_reason or "Card payment failed",
    )


def _process_momo(amount: int, context: PaymentContext) -> PaymentOutcome:
    transaction_id = _transaction_id("MOMO")
    return PaymentOutcome(
        method=PaymentMethod.MOMO.value,
        amount=amount,
        status=PaymentStatus.WAITING_PAYMENT.value,
        success=True,
        message="Awaiting payment through MoMo",
        transaction_id=transaction_id,
        details={
            "deep_link": f"momo://payment?amount={amount}&orderId={quote(context.order_reference)}",
            "qr_code": (
                f"https://api.qrserver.com/v1/create-qr-code/?size=300x300&data={quote(transaction_id.lower())}"
            ),
        },
    )


_VALIDATORS = {
    PaymentMethod.COD: _validate_cod,
    PaymentMethod.BANK_TRANSFER: _validate_bank_transfer,
    PaymentMethod.CREDIT_CARD: _validate_credit_card,
    PaymentMethod.MOMO: _validate_momo,
}

_PROCESSORS = {
    PaymentMethod.COD: _process_cod,
    PaymentMethod.BANK_TRANSFER: _process_bank_transfer,
    PaymentMethod.CREDIT_CARD: _process_credit_card,
    PaymentMethod.MOMO: _process_momo,
}


@dataclass(frozen=True)
class PaymentHandler:
    """The validate/process capability for one payment method."""

    method: PaymentMethod

    def validate(self, payment_info: dict | None) -> PaymentValidation:
        return _VALIDATORS[self.method](payment_info or {})

    def process(self, amount: int, context: PaymentContext) -> PaymentOutcome:
        return _PROCESSORS[self.method](amount, context)


def resolve_method(method_name: str | None) -> PaymentMethod | None:
    """The method a name refers to, or None if it is not recognized."""
    if not method_name:
        return None
    return _ALIASES.get(str(method_name).strip().upper())


def select(method_name: str | None) -> PaymentHandler:
    """Return the handler for ``method_name``. Unrecognized names get COD."""
    method = resolve_method(method_name)
    if method is None:
        logger.info("Unknown payment method, falling back to COD", requested=method_name)
        method = DEFAULT_METHOD
    return PaymentHandler(method=method)
