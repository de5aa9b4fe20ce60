import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from ordering.auth import reset_identity_provider
from ordering.auth.port import Identity
from ordering.cart.items import AddToCart
from ordering.catalogue.product import Product
from ordering.inventory.locks import order_locks, stock_locks
from ordering.notification.channel import reset_channels
from ordering.payment.authorizer import reset_card_authorizer, set_card_authorizer
from ordering.payment.authorizer.fake_adapter import FakeCardAuthorizer


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _reset_adapters(monkeypatch):
    """Fresh adapters, locks and an unconfigured mailer for every test."""
    monkeypatch.delenv("EMAIL_USER", raising=False)
    monkeypatch.delenv("EMAIL_PASS", raising=False)
    monkeypatch.delenv("EMAIL_USERNAME", raising=False)
    monkeypatch.delenv("EMAIL_PASSWORD", raising=False)
    monkeypatch.delenv("NOTIFICATION_CHANNEL_TIMEOUT", raising=False)
    reset_card_authorizer()
    reset_channels()
    reset_identity_provider()
    yield
    reset_card_authorizer()
    reset_channels()
    reset_identity_provider()
    stock_locks.clear()
    order_locks.clear()


@pytest.fixture()
def email_enabled(monkeypatch):
    monkeypatch.setenv("EMAIL_USER", "orders@smartstore.vn")
    monkeypatch.setenv("EMAIL_PASS", "app-password")


@pytest.fixture()
def card_authorizer():
    authorizer = FakeCardAuthorizer()
    set_card_authorizer(authorizer)
    return authorizer


@pytest.fixture()
def customer():
    return Identity(customer_id="cust-001", email="an.nguyen@example.com", name="An Nguyen")


@pytest.fixture()
def other_customer():
    return Identity(customer_id="cust-002", email="binh.tran@example.com", name="Binh Tran")


@pytest.fixture()
def admin():
    return Identity(customer_id="admin-001", is_admin=True, email="admin@smartstore.vn", name="Admin")


@pytest.fixture()
def make_product():
    """Persist a catalogue product and return it."""

    def _make(name="Dế Mèn Phiêu Lưu Ký", price=80_000, stock_count=10, category="Sách văn học", **kwargs):
        product = Product.register(name=name, price=price, stock_count=stock_count, category=category, **kwargs)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def fill_cart():
    """Add a product to a customer's cart through the cart command."""

    def _fill(identity, product, quantity=1):
        current_domain.process(
            AddToCart(customer_id=identity.customer_id, product_id=str(product.id), quantity=quantity),
            asynchronous=False,
        )

    return _fill


@pytest.fixture()
def stock_of():
    """Read a product's persisted stock count."""

    def _stock(product) -> int:
        return current_domain.repository_for(Product).get(str(product.id)).stock_count

    return _stock
