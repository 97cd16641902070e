"""Cross-domain event contracts published by the Payments context.

The source-of-truth events are in src/payments/payment/events.py; these are
the shapes Ordering is allowed to see.
"""

from datetime import UTC, datetime
from uuid import uuid4

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String

PAYMENT_COMPLETED_V1 = "Payments.PaymentCompletedIntegrationEvent.v1"
PAYMENT_FAILED_V1 = "Payments.PaymentFailedIntegrationEvent.v1"


def _positive(value: float) -> None:
    if value <= 0:
        raise ValueError("must be greater than 0")


class PaymentCompletedIntegrationEvent(BaseEvent):
    """Funds for an order were captured."""

    event_id = Identifier(default=lambda: str(uuid4()))
    created_at = DateTime(default=lambda: datetime.now(UTC))

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Float(required=True, validators=[_positive])
    paid_at = DateTime(required=True)


class PaymentFailedIntegrationEvent(BaseEvent):
    """A payment attempt for an order failed."""

    event_id = Identifier(default=lambda: str(uuid4()))
    created_at = DateTime(default=lambda: datetime.now(UTC))

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
