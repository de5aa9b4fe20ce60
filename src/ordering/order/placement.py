"""Order placement and checkout rollback — commands and handler."""

import json

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


@ordering.command(part_of="Order")
class PlaceOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=255)
    customer_name = String(max_length=255)
    items = Text(required=True)  # JSON: list of cart line dicts
    shipping_address = Text(required=True)  # JSON: address dict
    subtotal = Integer(required=True, min_value=0)
    shipping_total = Integer(default=0)
    add_ons_total = Integer(default=0)
    total_price = Integer(required=True, min_value=0)
    add_ons = Text()  # JSON: list of applied add-on dicts
    shipping_lines = Text(required=True)  # JSON: list of shipping line dicts
    payment_outcome = Text(required=True)  # JSON: PaymentOutcome.to_dict()


@ordering.command(part_of="Order")
class DiscardOrder:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = Order.place(
            order_id=command.order_id,
            customer_id=command.customer_id,
            customer_email=command.customer_email,
            customer_name=command.customer_name,
            items_data=_loads(command.items),
            shipping_address=_loads(command.shipping_address),
            pricing={
                "subtotal": command.subtotal,
                "shipping_total": command.shipping_total or 0,
                "add_ons_total": command.add_ons_total or 0,
                "total_price": command.total_price,
            },
            add_ons_data=_loads(command.add_ons) or [],
            shipping_lines_data=_loads(command.shipping_lines),
            payment_outcome=_loads(command.payment_outcome),
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)

    @handle(DiscardOrder)
    def discard_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.discard(reason=command.reason)
        repo.add(order)
        repo._dao.delete(order)
