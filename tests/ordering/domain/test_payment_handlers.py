"""Tests for payment method selection, validation and processing."""

import random

import pytest
from ordering.payment.authorizer import get_card_authorizer, reset_card_authorizer, set_card_authorizer
from ordering.payment.authorizer.fake_adapter import FakeCardAuthorizer
from ordering.payment.authorizer.random_adapter import RandomCardAuthorizer
from ordering.payment.catalog import default_method, payment_methods
from ordering.payment.handlers import (
    BANK_INFO,
    PaymentContext,
    PaymentMethod,
    PaymentStatus,
    resolve_method,
    select,
)

VALID_CARD = {"card_number": "4111111111111111", "cvv": "123", "expiry_date": "12/28"}


def _context(**payment_info):
    return PaymentContext(order_reference="ord-123", customer_id="cust-001", payment_info=payment_info)


class TestSelect:
    @pytest.mark.parametrize(
        "name,method",
        [
            ("COD", PaymentMethod.COD),
            ("cod", PaymentMethod.COD),
            ("BANK", PaymentMethod.BANK_TRANSFER),
            ("bank_transfer", PaymentMethod.BANK_TRANSFER),
            ("CARD", PaymentMethod.CREDIT_CARD),
            ("Credit_Card", PaymentMethod.CREDIT_CARD),
            ("momo", PaymentMethod.MOMO),
        ],
    )
    def test_aliases(self, name, method):
        assert select(name).method == method

    @pytest.mark.parametrize("name", ["PAYPAL", "", None])
    def test_unknown_falls_back_to_cod(self, name):
        assert select(name).method == PaymentMethod.COD

    def test_resolve_method_reports_unknown(self):
        assert resolve_method("PAYPAL") is None


class TestValidation:
    def test_cod_and_momo_always_valid(self):
        assert select("COD").validate(None).valid
        assert select("MOMO").validate({}).valid

    def test_bank_transfer_requires_code(self):
        assert not select("BANK").validate({}).valid
        assert select("BANK").validate({"transfer_code": "FT2401"}).valid

    def test_card_requires_all_fields(self):
        result = select("CARD").validate({"card_number": "4111111111111111"})
        assert not result.valid
        assert "required" in result.message

    def test_card_number_must_have_sixteen_digits(self):
        result = select("CARD").validate({**VALID_CARD, "card_number": "4111 1111 1111"})
        assert not result.valid
        assert "16 digits" in result.message

    def test_cvv_must_have_three_digits(self):
        assert not select("CARD").validate({**VALID_CARD, "cvv": "12"}).valid

    def test_valid_card(self):
        assert select("CARD").validate(VALID_CARD).valid


class TestProcessing:
    def test_cod_is_pending(self):
        outcome = select("COD").process(190_000, _context())
        assert outcome.success
        assert outcome.status == PaymentStatus.PENDING.value
        assert outcome.transaction_id.startswith("COD_")
        assert outcome.paid_at is None

    def test_bank_transfer_waits_for_confirmation(self):
        outcome = select("BANK").process(190_000, _context(transfer_code="FT2401"))
        assert outcome.status == PaymentStatus.WAITING_CONFIRMATION.value
        assert outcome.details["bank_info"] == BANK_INFO
        assert outcome.details["transfer_content"] == "SMART ord-123"

    def test_momo_has_deep_link(self):
        outcome = select("MOMO").process(190_000, _context())
        assert outcome.status == PaymentStatus.WAITING_PAYMENT.value
        assert outcome.details["deep_link"] == "momo://payment?amount=190000&orderId=ord-123"
        assert outcome.details["qr_code"].startswith("https://")

    def test_card_approved_is_paid(self, card_authorizer):
        outcome = select("CARD").process(190_000, _context(**VALID_CARD))
        assert outcome.success
        assert outcome.status == PaymentStatus.PAID.value
        assert outcome.paid_at is not None
        assert outcome.transaction_id.startswith("CC_")
        assert card_authorizer.calls == [{"amount": 190_000, "card_last4": "1111", "reference": "ord-123"}]

    def test_card_declined_is_failed(self, card_authorizer):
        card_authorizer.configure(should_approve=False, decline_reason="Insufficient funds")
        outcome = select("CARD").process(190_000, _context(**VALID_CARD))
        assert not outcome.success
        assert outcome.status == PaymentStatus.FAILED.value
        assert outcome.message == "Insufficient funds"
        assert outcome.transaction_id is None

    def test_outcome_to_dict(self):
        data = select("COD").process(1_000, _context()).to_dict()
        assert data["method"] == "COD"
        assert data["amount"] == 1_000
        assert data["paid_at"] is None


class TestCardAuthorizers:
    def test_fake_is_selected_by_environment(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_CARD_AUTHORIZER", "fake")
        reset_card_authorizer()
        assert isinstance(get_card_authorizer(), FakeCardAuthorizer)

    def test_random_is_the_default(self, monkeypatch):
        monkeypatch.delenv("PAYMENT_CARD_AUTHORIZER", raising=False)
        reset_card_authorizer()
        assert isinstance(get_card_authorizer(), RandomCardAuthorizer)

    def test_unknown_adapter_is_rejected(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_CARD_AUTHORIZER", "stripe")
        reset_card_authorizer()
        with pytest.raises(ValueError):
            get_card_authorizer()

    def test_random_authorizer_extremes(self):
        always = RandomCardAuthorizer(approval_rate=1.0, rng=random.Random(7))
        never = RandomCardAuthorizer(approval_rate=0.0, rng=random.Random(7))
        assert all(always.authorize(1, "1111", "r").approved for _ in range(20))
        assert not any(never.authorize(1, "1111", "r").approved for _ in range(20))

    def test_random_authorizer_approves_most(self):
        authorizer = RandomCardAuthorizer(rng=random.Random(42))
        approved = sum(authorizer.authorize(1, "1111", f"r{i}").approved for i in range(1000))
        assert 850 <= approved <= 950

    def test_random_authorizer_rejects_bad_rate(self):
        with pytest.raises(ValueError):
            RandomCardAuthorizer(approval_rate=1.5)

    def test_set_card_authorizer(self):
        authorizer = FakeCardAuthorizer()
        set_card_authorizer(authorizer)
        assert get_card_authorizer() is authorizer


class TestCatalog:
    def test_lists_every_method(self):
        methods = {m["method"] for m in payment_methods()}
        assert methods == {"COD", "BANK_TRANSFER", "CREDIT_CARD", "MOMO"}

    def test_bank_transfer_lists_account(self):
        bank = next(m for m in payment_methods() if m["method"] == "BANK_TRANSFER")
        assert bank["bank_info"]["account_number"] == "1234567890"

    def test_default_is_cod(self):
        assert default_method() == "COD"
