"""Shipping classification and per-item shipping fees.

A product's category (or brand, when the category is empty) is matched
case-insensitively against keyword lists in priority order: Book, then
Electronic, then Clothing. Anything unmatched falls back to Book's rule.

Each class has a free-shipping threshold on the unit price and a flat fee
charged per unit when the price does not exceed that threshold.
"""

from dataclasses import dataclass
from enum import Enum


class ShippingClass(Enum):
    BOOK = "Book"
    ELECTRONIC = "Electronic"
    CLOTHING = "Clothing"
    OTHER = "Other"


@dataclass(frozen=True)
class ShippingRule:
    free_above: int
    flat_fee: int


_RULES = {
    ShippingClass.BOOK: ShippingRule(free_above=100_000, flat_fee=15_000),
    ShippingClass.ELECTRONIC: ShippingRule(free_above=500_000, flat_fee=30_000),
    ShippingClass.CLOTHING: ShippingRule(free_above=200_000, flat_fee=20_000),
    ShippingClass.OTHER: ShippingRule(free_above=100_000, flat_fee=15_000),
}

# Checked in order; first match wins
_KEYWORDS = (
    (ShippingClass.BOOK, ("văn học", "sách", "book")),
    (ShippingClass.ELECTRONIC, ("điện tử", "electronic")),
    (ShippingClass.CLOTHING, ("quần áo", "thời trang", "clothing")),
)

# Unmatched categories use Book's rule
DEFAULT_CLASS = ShippingClass.BOOK


def classify(category: str | None) -> ShippingClass:
    """Map a category (or brand) string to its shipping class."""
    text = (category or "").lower()
    for shipping_class, keywords in _KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return shipping_class
    return DEFAULT_CLASS


def rule_for(shipping_class: ShippingClass) -> ShippingRule:
    return _RULES[shipping_class]


def shipping_fee(shipping_class: ShippingClass, unit_price: int) -> int:
    """Per-unit shipping fee for a product of the given class and price."""
    rule = _RULES[shipping_class]
    if unit_price > rule.free_above:
        return 0
    return rule.flat_fee
