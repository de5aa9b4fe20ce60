"""Payment-method catalog shown to shoppers at checkout."""

from ordering.payment.handlers import BANK_INFO, DEFAULT_METHOD, PaymentMethod

_DESCRIPTORS = {
    PaymentMethod.COD: {
        "name": "Cash on delivery",
        "description": "Pay in cash when the order arrives",
        "icon": "💵",
        "fee": 0,
        "processing_time": "Immediate",
    },
    PaymentMethod.BANK_TRANSFER: {
        "name": "Bank transfer",
        "description": "Transfer to the store's bank account",
        "icon": "🏦",
        "fee": 0,
        "processing_time": "1-2 hours",
        "bank_info": BANK_INFO,
    },
    PaymentMethod.CREDIT_CARD: {
        "name": "Credit/debit card",
        "description": "Pay with Visa or Mastercard",
        "icon": "💳",
        "fee": 0,
        "processing_time": "Immediate",
    },
    PaymentMethod.MOMO: {
        "name": "MoMo wallet",
        "description": "Pay with the MoMo e-wallet",
        "icon": "📱",
        "fee": 0,
        "processing_time": "Immediate",
    },
}


def payment_methods() -> list[dict]:
    return [{"method": method.value, **descriptor} for method, descriptor in _DESCRIPTORS.items()]


def default_method() -> str:
    return DEFAULT_METHOD.value
