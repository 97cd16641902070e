"""Cross-domain event contracts published by the Ordering context.

Consumers in other contexts depend on these classes only, never on the
Ordering domain's internal events. Each context that produces or consumes a
contract registers it with ``domain.register_external_event()`` under the
type string below, so both sides agree on its wire name.
"""

from datetime import UTC, datetime
from uuid import uuid4

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String

ORDER_SUBMITTED_V1 = "Ordering.OrderSubmittedIntegrationEvent.v1"


class OrderSubmittedIntegrationEvent(BaseEvent):
    """An order was submitted and now awaits payment."""

    event_id = Identifier(default=lambda: str(uuid4()))
    created_at = DateTime(default=lambda: datetime.now(UTC))

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True, min_value=0.0)
    currency = String(required=True, min_length=3, max_length=3)
