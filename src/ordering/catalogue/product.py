"""Product aggregate (CQRS) — the catalogue records the pipeline reads.

Product management lives outside the ordering context; here a product is
a read model with one controlled mutation: its stock counter. Stock only
changes through ``commit_stock`` and ``restock``, and never drops below zero.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import NotFoundError


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Integer(required=True, min_value=0)
    category = String(max_length=100)
    brand = String(max_length=100)
    shipping_hint = String(max_length=100)
    image = String(max_length=500)
    stock_count = Integer(default=0)
    updated_at = DateTime()

    @invariant.post
    def stock_is_never_negative(self):
        if self.stock_count is not None and self.stock_count < 0:
            raise ValidationError({"stock_count": ["Stock count cannot be negative"]})

    @classmethod
    def register(cls, name, price, stock_count=0, category=None, brand=None, shipping_hint=None, image=None, id=None):
        kwargs = {"id": id} if id else {}
        return cls(
            name=name,
            price=price,
            category=category,
            brand=brand,
            shipping_hint=shipping_hint,
            image=image,
            stock_count=stock_count,
            updated_at=datetime.now(UTC),
            **kwargs,
        )

    def has_stock_for(self, quantity: int) -> bool:
        return (self.stock_count or 0) >= quantity

    def commit_stock(self, quantity: int):
        """Decrement stock for an order line. Fails rather than go negative."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if not self.has_stock_for(quantity):
            raise ValidationError(
                {"stock_count": [f"Insufficient stock: {self.stock_count} available, {quantity} requested"]}
            )
        self.stock_count = self.stock_count - quantity
        self.updated_at = datetime.now(UTC)

    def restock(self, quantity: int):
        """Return stock from a cancelled order line. No upper bound."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        self.stock_count = (self.stock_count or 0) + quantity
        self.updated_at = datetime.now(UTC)


class CatalogLookup:
    """Read access to products for the checkout pipeline."""

    def find(self, product_id) -> Product | None:
        try:
            return current_domain.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            return None

    def get(self, product_id) -> Product:
        product = self.find(product_id)
        if product is None:
            raise NotFoundError("Product", str(product_id))
        return product

    def get_many(self, product_ids) -> dict[str, Product]:
        """Load each distinct product once. Raises NotFoundError on the first miss."""
        products = {}
        for product_id in product_ids:
            key = str(product_id)
            if key not in products:
                products[key] = self.get(key)
        return products
