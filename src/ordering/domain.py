"""Ordering bounded context — SmartStore checkout and order fulfillment.

Handles the customer cart, the order-creation pipeline (pricing, payment
selection, inventory commit, notification fan-out) and the order status
lifecycle that follows it.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
