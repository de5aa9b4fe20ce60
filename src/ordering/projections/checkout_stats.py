"""Checkout stats projection — advisory daily counters for the admin dashboard.

Counts orders placed, items checked out, cancellations and checkout
rollbacks per day, with revenue net of cancelled and rolled-back orders.
Keyed by date (YYYY-MM-DD). Never consulted by the checkout itself.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import OrderCancelled, OrderDiscarded, OrderPlaced
from ordering.order.order import Order


@ordering.projection
class CheckoutStats:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    orders_placed = Integer(default=0)
    items_checked_out = Integer(default=0)
    orders_cancelled = Integer(default=0)
    orders_rolled_back = Integer(default=0)
    revenue = Integer(default=0)


def _get_or_create(date_key):
    repo = current_domain.repository_for(CheckoutStats)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return CheckoutStats(
            date=date_key,
            orders_placed=0,
            items_checked_out=0,
            orders_cancelled=0,
            orders_rolled_back=0,
            revenue=0,
        )


@ordering.projector(projector_for=CheckoutStats, aggregates=[Order])
class CheckoutStatsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_at.date().isoformat())
        record.orders_placed = (record.orders_placed or 0) + 1
        record.items_checked_out = (record.items_checked_out or 0) + (event.item_count or 0)
        record.revenue = (record.revenue or 0) + (event.total_price or 0)
        current_domain.repository_for(CheckoutStats).add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create(event.cancelled_at.date().isoformat())
        record.orders_cancelled = (record.orders_cancelled or 0) + 1
        record.revenue = (record.revenue or 0) - (event.total_price or 0)
        current_domain.repository_for(CheckoutStats).add(record)

    @on(OrderDiscarded)
    def on_order_discarded(self, event):
        record = _get_or_create(event.discarded_at.date().isoformat())
        record.orders_rolled_back = (record.orders_rolled_back or 0) + 1
        record.items_checked_out = (record.items_checked_out or 0) - (event.item_count or 0)
        record.revenue = (record.revenue or 0) - (event.total_price or 0)
        current_domain.repository_for(CheckoutStats).add(record)


def stats_summary() -> dict:
    """All days, newest first, plus running totals."""
    days = current_domain.repository_for(CheckoutStats)._dao.query.all().items
    days = sorted(days, key=lambda d: d.date, reverse=True)
    fields = ("orders_placed", "items_checked_out", "orders_cancelled", "orders_rolled_back", "revenue")
    totals = {name: sum(getattr(day, name) or 0 for day in days) for name in fields}
    return {
        "totals": totals,
        "days": [{"date": day.date, **{name: getattr(day, name) or 0 for name in fields}} for day in days],
    }
