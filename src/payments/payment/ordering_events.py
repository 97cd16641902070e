"""Inbound cross-domain event handler: Payments reacts to Ordering events.

A submitted order opens a Pending payment for its total. With automatic
capture switched on the payment is settled with the gateway in the same
command, so a gateway outage leaves no payment behind and the event stays
queued for redelivery. Redelivered events are recognised by id through the
context's inbox. A payment is opened at most once per order: an order that
already has a Pending payment only has that payment captured.

Each delivery sends a single command, since the handler runs inside one
transaction and a second command would not see the first one's writes.

Cross-domain events are imported from shared.events.ordering and registered
as external events via payments.register_external_event().
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.context import current_context
from shared.events.ordering import ORDER_SUBMITTED_V1, OrderSubmittedIntegrationEvent
from shared.messaging import type_of

from payments.domain import payments
from payments.payment.payment import Payment
from payments.payment.processing import CapturePayment
from payments.payment.status import PaymentStatus
from payments.payment.translators import OrderSubmittedTranslator

logger = structlog.get_logger(__name__)

# Register external event so Protean can route it to the handler below
payments.register_external_event(OrderSubmittedIntegrationEvent, ORDER_SUBMITTED_V1)


@payments.event_handler(part_of=Payment, stream_category="ordering::order")
class OrderEventsHandler:
    """Opens, and optionally captures, the payment for a submitted order."""

    @handle(OrderSubmittedIntegrationEvent)
    def on_order_submitted(self, event: OrderSubmittedIntegrationEvent) -> None:
        context = current_context()
        if event.event_id in context.inbox:
            logger.info("Duplicate integration event ignored", event_type=type_of(event), event_id=event.event_id)
            return

        capture = context.settings.auto_capture_payments
        payment = current_domain.repository_for(Payment).by_order(str(event.order_id))
        if payment is None:
            translator = OrderSubmittedTranslator(context.settings.default_payment_method, capture=capture)
            payment_id = context.send(translator.to_command(event))
            logger.info(
                "Payment opened for submitted order",
                order_id=str(event.order_id),
                payment_id=payment_id,
                amount=event.total_amount,
                captured=capture,
            )
        elif capture and payment.status == PaymentStatus.PENDING.value:
            context.send(CapturePayment(payment_id=str(payment.id)))
        else:
            logger.info("Order already has a payment", order_id=str(event.order_id), payment_id=str(payment.id))

        context.inbox.record(event.event_id)
