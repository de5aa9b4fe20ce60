"""Order price breakdown — subtotal, per-item shipping and add-ons."""

from dataclasses import dataclass

from ordering.pricing.addons import AppliedAddOn, apply_add_ons
from ordering.pricing.shipping import ShippingClass, classify, shipping_fee


@dataclass(frozen=True)
class ShippingLine:
    product_id: str
    shipping_class: ShippingClass
    fee: int
    quantity: int

    @property
    def total(self) -> int:
        return self.fee * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "shipping_class": self.shipping_class.value,
            "fee": self.fee,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: int
    shipping_total: int
    add_ons_total: int
    total_price: int
    shipping_lines: tuple[ShippingLine, ...]
    add_ons: tuple[AppliedAddOn, ...]

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "shipping_total": self.shipping_total,
            "add_ons_total": self.add_ons_total,
            "total_price": self.total_price,
            "shipping_lines": [line.to_dict() for line in self.shipping_lines],
            "add_ons": [add_on.to_dict() for add_on in self.add_ons],
        }


def shipping_category_of(product) -> str | None:
    """The string a product is classified by: hint, then category, then brand."""
    return product.shipping_hint or product.category or product.brand


def price_cart(lines, products: dict, requested_add_ons: list[dict] | None = None) -> PriceBreakdown:
    """Price a cart snapshot.

    Args:
        lines: Cart lines with product_id, unit_price and quantity.
        products: Product records keyed by product id (as str).
        requested_add_ons: Ordered ``{"type", "enabled"}`` add-on requests.
    """
    subtotal = 0
    shipping_lines = []
    for line in lines:
        product = products[str(line.product_id)]
        shipping_class = classify(shipping_category_of(product))
        fee = shipping_fee(shipping_class, line.unit_price)
        subtotal += line.unit_price * line.quantity
        shipping_lines.append(
            ShippingLine(
                product_id=str(line.product_id),
                shipping_class=shipping_class,
                fee=fee,
                quantity=line.quantity,
            )
        )

    shipping_total = sum(line.total for line in shipping_lines)
    result = apply_add_ons(subtotal + shipping_total, requested_add_ons)

    return PriceBreakdown(
        subtotal=subtotal,
        shipping_total=shipping_total,
        add_ons_total=result.add_ons_total,
        total_price=result.final_total,
        shipping_lines=tuple(shipping_lines),
        add_ons=result.applied,
    )
