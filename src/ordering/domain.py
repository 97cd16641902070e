"""Ordering bounded context: order lifecycle from draft to delivery."""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
