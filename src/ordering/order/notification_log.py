"""Notification log — command and handler that append dispatch results to an order."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class RecordNotifications:
    order_id = Identifier(required=True)
    event = String(required=True, max_length=50)
    records = Text(required=True)  # JSON: list of NotificationRecord dicts


@ordering.command_handler(part_of=Order)
class RecordNotificationsHandler:
    @handle(RecordNotifications)
    def record_notifications(self, command):
        records = json.loads(command.records) if isinstance(command.records, str) else command.records
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_notifications(command.event, records)
        repo.add(order)
