"""Shared BDD fixtures and step definitions for the Ordering domain."""

import asyncio

import pytest
from ordering.cart.cart import cart_for
from ordering.catalogue.product import Product
from ordering.checkout.lifecycle import OrderLifecycle
from ordering.order.order import Order
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then

ADDRESS = {"address": "12 Trang Tien", "city": "Ha Noi", "phone": "0901234567"}
PAYMENT_INFO = {"card_number": "4111111111111111", "cvv": "123", "expiry_date": "12/28", "transfer_code": "FT2401"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def lifecycle():
    return OrderLifecycle()


@pytest.fixture()
def products():
    """Products created by Given steps, keyed by name."""
    return {}


@pytest.fixture()
def outcome():
    """Container for the last result, the order it produced, or the captured error."""
    return {"result": None, "order_id": None, "error": None}


@pytest.fixture()
def checkout(lifecycle, outcome):
    """Check out a cart and remember the new order's id."""

    def _checkout(identity, method, add_ons=None):
        result = asyncio.run(
            lifecycle.create_order(
                identity,
                shipping_address=ADDRESS,
                payment_method=method,
                add_ons=add_ons,
                payment_info=PAYMENT_INFO,
            )
        )
        outcome["order_id"] = str(result.order.id)
        return result

    return _checkout


@pytest.fixture()
def move_order(lifecycle, outcome):
    def _move(identity, status):
        return asyncio.run(lifecycle.transition_status(identity, outcome["order_id"], status))

    return _move


@pytest.fixture()
def capture(outcome):
    """Run an action and keep either its result or the domain error it raised."""

    def _capture(action):
        try:
            outcome["result"] = action()
            outcome["error"] = None
        except (ValidationError, ObjectNotFoundError) as exc:
            outcome["error"] = exc

    return _capture


@pytest.fixture()
def current_order(outcome):
    def _order() -> Order:
        return current_domain.repository_for(Order).get(outcome["order_id"])

    return _order


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:d} in category "{category}" with {stock:d} in stock'))
def _(products, make_product, name, price, category, stock):
    products[name] = make_product(name=name, price=price, category=category, stock_count=stock)


@given(parsers.cfparse('the customer has {quantity:d} of "{name}" in the cart'))
def _(products, customer, fill_cart, quantity, name):
    fill_cart(customer, products[name], quantity)


@given(parsers.cfparse('"{name}" drops to {stock:d} in stock'))
def _(products, name, stock):
    repo = current_domain.repository_for(Product)
    product = repo.get(str(products[name].id))
    product.commit_stock(product.stock_count - stock)
    repo.add(product)


@given("the card gateway declines charges")
def _(card_authorizer):
    card_authorizer.configure(should_approve=False, decline_reason="Card declined")


@given(parsers.cfparse("the customer checked out paying by {method:w}"))
def _(checkout, customer, outcome, method):
    outcome["result"] = checkout(customer, method)


@given(parsers.cfparse('the admin moved the order to "{status}"'))
def _(move_order, admin, status):
    move_order(admin, status)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(current_order, status):
    assert current_order().status == status


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, stock_of, name, stock):
    assert stock_of(products[name]) == stock


@then("no order exists")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().items == []


@then("the cart is empty")
def _(customer):
    assert cart_for(customer.customer_id).snapshot() == ()


@then(parsers.cfparse('the request is rejected with "{message}"'))
def _(outcome, message):
    assert outcome["error"] is not None
    assert message in str(outcome["error"].messages)
