"""Application tests for listing orders beyond a single repository page."""

from datetime import UTC, datetime, timedelta

import pytest
from ordering.checkout.lifecycle import OrderLifecycle
from ordering.order.order import Order
from protean import current_domain

BASE_TIME = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)


def _store(order_number, customer_id):
    order = Order.place(
        order_id=f"ord-{order_number:03d}",
        customer_id=customer_id,
        items_data=[{"product_id": "prod-001", "name": "Book", "unit_price": 120_000, "quantity": 1}],
        shipping_address={"address": "12 Trang Tien", "city": "Ha Noi", "phone": "0901234567"},
        pricing={"subtotal": 120_000, "shipping_total": 0, "add_ons_total": 0, "total_price": 120_000},
        add_ons_data=[],
        shipping_lines_data=[],
        payment_outcome={"method": "COD", "status": "PENDING"},
    )
    order.created_at = BASE_TIME + timedelta(minutes=order_number)
    current_domain.repository_for(Order).add(order)


@pytest.fixture()
def many_orders(customer, other_customer):
    for number in range(105):
        _store(number, customer.customer_id if number % 5 else other_customer.customer_id)


def test_admin_sees_every_order_newest_first(admin, many_orders):
    orders = OrderLifecycle().list_all_orders(admin)
    assert len(orders) == 105
    assert str(orders[0].id) == "ord-104"
    assert str(orders[-1].id) == "ord-000"


def test_customer_sees_only_own_orders(customer, other_customer, many_orders):
    lifecycle = OrderLifecycle()
    own = lifecycle.list_orders_for(customer)
    assert len(own) == 84
    assert str(own[0].id) == "ord-104"
    assert len(lifecycle.list_orders_for(other_customer)) == 21
