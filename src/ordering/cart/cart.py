"""Customer cart aggregate (CQRS) — one cart per customer, keyed by customer id.

The cart is the source of the checkout snapshot. Adding a product that is
already in the cart merges quantities; additions are checked against the
product's current stock. Clearing happens after a successful checkout.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering


@dataclass(frozen=True)
class CartLine:
    """One line of a checkout snapshot. Immutable once taken."""

    product_id: str
    name: str
    unit_price: int
    quantity: int
    image: str | None = None

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "image": self.image,
        }


@ordering.entity(part_of="CustomerCart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=500)
    added_at = DateTime()


@ordering.aggregate
class CustomerCart:
    customer_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        return cls(customer_id=str(customer_id), updated_at=datetime.now(UTC))

    def _find(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def add_item(self, product_id, name, unit_price, quantity, image=None, available=None):
        """Add a product, merging with an existing line for the same product.

        ``available`` is the product's current stock; the merged quantity may
        not exceed it.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if available is not None and available <= 0:
            raise ValidationError({"product_id": [f'"{name}" is out of stock']})

        existing = self._find(product_id)
        in_cart = existing.quantity if existing else 0
        if available is not None and in_cart + quantity > available:
            message = f"Only {available} left"
            if in_cart:
                message += f", you already have {in_cart} in your cart"
            raise ValidationError({"quantity": [message]})

        now = datetime.now(UTC)
        if existing:
            existing.quantity = in_cart + quantity
            existing.unit_price = unit_price
        else:
            self.add_items(
                CartItem(
                    product_id=str(product_id),
                    name=name,
                    unit_price=unit_price,
                    quantity=quantity,
                    image=image,
                    added_at=now,
                )
            )
        self.updated_at = now

    def update_quantity(self, product_id, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        item = self._find(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

    def remove_item(self, product_id):
        item = self._find(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def snapshot(self) -> tuple[CartLine, ...]:
        return tuple(
            CartLine(
                product_id=str(item.product_id),
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                image=item.image,
            )
            for item in self.items
        )


def cart_for(customer_id) -> CustomerCart:
    """Load the customer's cart, or a new empty (unsaved) one."""
    try:
        return current_domain.repository_for(CustomerCart).get(str(customer_id))
    except ObjectNotFoundError:
        return CustomerCart.create(customer_id)
