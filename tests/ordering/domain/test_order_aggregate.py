"""Tests for Order placement, derived values and the notification log."""

import json

import pytest
from ordering.errors import TransitionError
from ordering.order.events import OrderDiscarded, OrderPlaced
from ordering.order.order import Order, OrderStatus
from protean import current_domain
from protean.exceptions import ValidationError


def _place(**overrides):
    data = {
        "order_id": "ord-100",
        "customer_id": "cust-001",
        "customer_email": "an.nguyen@example.com",
        "customer_name": "An Nguyen",
        "items_data": [
            {"product_id": "prod-001", "name": "Book", "unit_price": 80_000, "quantity": 2, "image": "/b.jpg"},
            {"product_id": "prod-002", "name": "Shirt", "unit_price": 150_000, "quantity": 1},
        ],
        "shipping_address": {"address": "12 Trang Tien", "city": "Ha Noi", "phone": "0901234567"},
        "pricing": {"subtotal": 310_000, "shipping_total": 50_000, "add_ons_total": 25_000, "total_price": 385_000},
        "add_ons_data": [{"kind": "giftWrap", "name": "Gift wrap", "description": "Premium gift wrapping", "cost": 25_000}],
        "shipping_lines_data": [
            {"product_id": "prod-001", "shipping_class": "Book", "fee": 15_000, "quantity": 2},
            {"product_id": "prod-002", "shipping_class": "Clothing", "fee": 20_000, "quantity": 1},
        ],
        "payment_outcome": {
            "method": "BANK_TRANSFER",
            "status": "WAITING_CONFIRMATION",
            "transaction_id": "BANK_1",
            "message": "Awaiting transfer confirmation",
            "paid_at": None,
            "details": {"transfer_content": "SMART ord-100"},
        },
    }
    data.update(overrides)
    return Order.place(**data)


class TestPlace:
    def test_starts_processing_and_unpaid(self):
        order = _place()
        assert order.status == OrderStatus.PROCESSING.value
        assert order.is_paid is False
        assert order.is_delivered is False
        assert order.created_at is not None

    def test_keeps_given_identity(self):
        assert str(_place().id) == "ord-100"

    def test_snapshot_fields(self):
        order = _place()
        assert len(order.items) == 2
        assert order.items[0].image == "/b.jpg"
        assert order.shipping_address.city == "Ha Noi"
        assert order.payment_method == "BANK_TRANSFER"
        assert order.customer_email == "an.nguyen@example.com"
        assert [line.shipping_class for line in order.shipping_lines] == ["Book", "Clothing"]
        assert [add_on.kind for add_on in order.add_ons] == ["giftWrap"]

    def test_payment_record(self):
        payment = _place().payment_outcome
        assert payment.status == "WAITING_CONFIRMATION"
        assert json.loads(payment.details) == {"transfer_content": "SMART ord-100"}

    def test_payment_method_and_outcome_survive_persistence(self):
        repo = current_domain.repository_for(Order)
        repo.add(_place())

        stored = repo.get("ord-100")
        assert stored.payment_method == "BANK_TRANSFER"
        assert stored.payment_outcome.method == "BANK_TRANSFER"
        assert stored.payment_outcome.status == "WAITING_CONFIRMATION"
        assert stored.payment_outcome.transaction_id == "BANK_1"

    def test_card_payment_marks_paid(self):
        outcome = {"method": "CREDIT_CARD", "status": "PAID", "paid_at": "2026-01-05T10:00:00+00:00"}
        order = _place(payment_outcome=outcome)
        assert order.is_paid is True
        assert order.paid_at is not None

    def test_raises_order_placed(self):
        order = _place()
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert event.item_count == 3
        assert event.total_price == 385_000
        assert event.payment_method == "BANK_TRANSFER"

    def test_total_must_be_sum_of_parts(self):
        pricing = {"subtotal": 310_000, "shipping_total": 50_000, "add_ons_total": 0, "total_price": 385_000}
        with pytest.raises(ValidationError) as exc:
            _place(pricing=pricing)
        assert "pricing" in exc.value.messages


class TestDerivedValues:
    def test_total_and_item_count(self):
        order = _place()
        assert order.total_price == 385_000
        assert order.item_count == 3

    def test_quantities_sum_repeated_products(self):
        items = [
            {"product_id": "prod-001", "name": "Book", "unit_price": 80_000, "quantity": 2},
            {"product_id": "prod-001", "name": "Book", "unit_price": 80_000, "quantity": 1},
        ]
        pricing = {"subtotal": 240_000, "shipping_total": 0, "add_ons_total": 0, "total_price": 240_000}
        order = _place(items_data=items, pricing=pricing, add_ons_data=[], shipping_lines_data=[])
        assert order.quantities() == {"prod-001": 3}


class TestNotificationLog:
    def test_appends_one_entry_per_record(self):
        order = _place()
        order.record_notifications(
            "ORDER_CREATED",
            [
                {"channel": "email", "status": "skipped", "recipient": None, "sent_at": None, "summary": "Email not configured"},
                {
                    "channel": "sms",
                    "status": "sent",
                    "recipient": "0901234567",
                    "sent_at": "2026-01-05T10:00:00+00:00",
                    "summary": "SMART: Order placed",
                },
            ],
        )
        assert [(e.event, e.channel, e.status) for e in order.notification_log] == [
            ("ORDER_CREATED", "email", "skipped"),
            ("ORDER_CREATED", "sms", "sent"),
        ]
        assert order.notification_log[1].sent_at is not None

    def test_log_is_append_only(self):
        order = _place()
        record = {"channel": "push", "status": "sent", "recipient": "cust-001"}
        order.record_notifications("ORDER_CREATED", [record])
        order.record_notifications("ORDER_CONFIRMED", [record])
        assert [e.event for e in order.notification_log] == ["ORDER_CREATED", "ORDER_CONFIRMED"]


class TestDiscard:
    def test_discard_raises_event(self):
        order = _place()
        order.discard("Stock commit failed")
        event = order._events[-1]
        assert isinstance(event, OrderDiscarded)
        assert event.reason == "Stock commit failed"
        assert event.total_price == 385_000

    def test_only_processing_orders_can_be_discarded(self):
        order = _place()
        order.confirm()
        with pytest.raises(TransitionError):
            order.discard("too late")
