"""Local handlers for Payment domain events.

Completed and failed payments are published to Ordering; everything else is
only logged.
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

from payments.domain import payments
from payments.payment.events import PaymentCompleted, PaymentCreated, PaymentFailed, PaymentRefunded
from payments.payment.payment import Payment
from payments.payment.translators import PaymentCompletedTranslator, PaymentFailedTranslator

logger = structlog.get_logger(__name__)

# Outbound contracts, published to Ordering
payments.register_external_event(PaymentCompletedIntegrationEvent, PAYMENT_COMPLETED_V1)
payments.register_external_event(PaymentFailedIntegrationEvent, PAYMENT_FAILED_V1)


@payments.event_handler(part_of=Payment)
class PaymentOutcomePublisher:
    @handle(PaymentCompleted)
    def on_payment_completed(self, event: PaymentCompleted) -> None:
        current_context().bus.publish(PaymentCompletedTranslator().to_integration_event(event))
        logger.info(
            "Payment completed",
            payment_id=str(event.payment_id),
            order_id=str(event.order_id),
            transaction_id=event.transaction_id,
        )

    @handle(PaymentFailed)
    def on_payment_failed(self, event: PaymentFailed) -> None:
        current_context().bus.publish(PaymentFailedTranslator().to_integration_event(event))
        logger.warning(
            "Payment failed",
            payment_id=str(event.payment_id),
            order_id=str(event.order_id),
            reason=event.reason,
        )


@payments.event_handler(part_of=Payment)
class PaymentLifecycleLogger:
    @handle(PaymentCreated)
    def on_payment_created(self, event: PaymentCreated) -> None:
        logger.info(
            "Payment created",
            payment_id=str(event.payment_id),
            order_id=str(event.order_id),
            amount=event.amount,
            method=event.method,
        )

    @handle(PaymentRefunded)
    def on_payment_refunded(self, event: PaymentRefunded) -> None:
        logger.info("Payment refunded", payment_id=str(event.payment_id), reason=event.reason)
