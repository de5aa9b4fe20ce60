"""Domain events for the Order aggregate.

Events are immutable facts about an order's lifecycle. They feed the
checkout statistics projection; nothing in the pipeline depends on them.
"""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A new order was persisted at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    item_count = Integer(required=True)
    total_price = Integer(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderConfirmed:
    """The store accepted the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    confirmed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    """The order left the warehouse."""

    __version__ = 1

    order_id = Identifier(required=True)
    shipped_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    """The order reached the customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its stock returned."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)
    cancelled_by = String(required=True)
    item_count = Integer(required=True)
    total_price = Integer(required=True)
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDiscarded:
    """A just-placed order was rolled back because its stock could not be committed."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True)
    item_count = Integer(required=True)
    total_price = Integer(required=True)
    discarded_at = DateTime(required=True)
