"""Application tests for cart commands via domain.process()."""

import pytest
from ordering.cart.cart import cart_for
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from ordering.errors import NotFoundError
from protean import current_domain
from protean.exceptions import ValidationError


def _add(customer_id, product, quantity):
    current_domain.process(
        AddToCart(customer_id=customer_id, product_id=str(product.id), quantity=quantity),
        asynchronous=False,
    )


class TestAddToCart:
    def test_copies_product_details(self, make_product):
        book = make_product(name="Số Đỏ", price=70_000, image="/so-do.jpg")
        _add("cust-001", book, 2)

        line = cart_for("cust-001").snapshot()[0]
        assert (line.name, line.unit_price, line.quantity, line.image) == ("Số Đỏ", 70_000, 2, "/so-do.jpg")

    def test_merges_repeated_additions(self, make_product):
        book = make_product(stock_count=5)
        _add("cust-001", book, 2)
        _add("cust-001", book, 3)
        assert cart_for("cust-001").snapshot()[0].quantity == 5

    def test_rejects_beyond_stock(self, make_product):
        book = make_product(stock_count=5)
        _add("cust-001", book, 4)
        with pytest.raises(ValidationError):
            _add("cust-001", book, 2)
        assert cart_for("cust-001").snapshot()[0].quantity == 4

    def test_rejects_sold_out_product(self, make_product):
        with pytest.raises(ValidationError):
            _add("cust-001", make_product(stock_count=0), 1)

    def test_unknown_product(self):
        with pytest.raises(NotFoundError):
            current_domain.process(
                AddToCart(customer_id="cust-001", product_id="prod-404", quantity=1),
                asynchronous=False,
            )

    def test_carts_are_per_customer(self, make_product):
        book = make_product()
        _add("cust-001", book, 1)
        assert cart_for("cust-002").snapshot() == ()


class TestChangeCart:
    def test_update_quantity(self, make_product):
        book = make_product()
        _add("cust-001", book, 1)
        current_domain.process(
            UpdateCartQuantity(customer_id="cust-001", product_id=str(book.id), quantity=4),
            asynchronous=False,
        )
        assert cart_for("cust-001").snapshot()[0].quantity == 4

    def test_remove(self, make_product):
        book = make_product()
        pen = make_product(name="Pen", price=5_000)
        _add("cust-001", book, 1)
        _add("cust-001", pen, 1)
        current_domain.process(RemoveFromCart(customer_id="cust-001", product_id=str(book.id)), asynchronous=False)
        assert [line.name for line in cart_for("cust-001").snapshot()] == ["Pen"]

    def test_clear(self, make_product):
        _add("cust-001", make_product(), 1)
        current_domain.process(ClearCart(customer_id="cust-001"), asynchronous=False)
        assert cart_for("cust-001").snapshot() == ()

    def test_clear_missing_cart_is_harmless(self):
        current_domain.process(ClearCart(customer_id="cust-999"), asynchronous=False)
        assert cart_for("cust-999").snapshot() == ()
