"""Payments bounded context: charging orders and handling refunds.

Payments never loads an Order. It knows orders only by reference and learns
about them through integration events.
"""

import structlog
from protean.domain import Domain

payments = Domain(name="payments")

logger = structlog.get_logger(__name__)
