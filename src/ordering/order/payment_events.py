"""Inbound cross-domain event handler: Ordering reacts to Payments events.

PaymentCompleted marks the order paid; PaymentFailed marks its payment as
failed. Redelivered events are recognised by id through the context's inbox,
so the bus can deliver at least once without an order ever being paid twice.

Cross-domain events are imported from shared.events.payments and registered
as external events via ordering.register_external_event().
"""

import structlog
from protean.utils.mixins import handle
from shared.context import current_context
from shared.events.payments import (
    PAYMENT_COMPLETED_V1,
    PAYMENT_FAILED_V1,
    PaymentCompletedIntegrationEvent,
    PaymentFailedIntegrationEvent,
)
from shared.messaging import type_of

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.translators import PaymentCompletedTranslator, PaymentFailedTranslator

logger = structlog.get_logger(__name__)

ordering.register_external_event(PaymentCompletedIntegrationEvent, PAYMENT_COMPLETED_V1)
ordering.register_external_event(PaymentFailedIntegrationEvent, PAYMENT_FAILED_V1)


def already_processed(event) -> bool:
    if event.event_id in current_context().inbox:
        logger.info("Duplicate integration event ignored", event_type=type_of(event), event_id=event.event_id)
        return True
    return False


@ordering.event_handler(part_of=Order, stream_category="payments::payment")
class PaymentEventsHandler:
    """Moves orders along as their payments settle."""

    @handle(PaymentCompletedIntegrationEvent)
    def on_payment_completed(self, event: PaymentCompletedIntegrationEvent) -> None:
        if already_processed(event):
            return

        context = current_context()
        context.send(PaymentCompletedTranslator().to_command(event))
        context.inbox.record(event.event_id)
        logger.info("Order marked as paid", order_id=str(event.order_id), payment_id=str(event.payment_id))

    @handle(PaymentFailedIntegrationEvent)
    def on_payment_failed(self, event: PaymentFailedIntegrationEvent) -> None:
        if already_processed(event):
            return

        context = current_context()
        context.send(PaymentFailedTranslator().to_command(event))
        context.inbox.record(event.event_id)
        logger.warning(
            "Order payment failed",
            order_id=str(event.order_id),
            payment_id=str(event.payment_id),
            reason=event.reason,
        )
