"""Ordering bounded context: order placement, lifecycle, payment and refunds.

Turns a customer's selected items into a durable order, reserves inventory
against it, and drives it through payment, fulfilment, cancellation and
refund while keeping money, stock and order state consistent.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
