"""Anti-corruption translators for the Payments context.

Outbound translators turn Payment domain events into the integration events
Ordering listens to. The inbound translator turns a submitted order into a
CreatePayment command, without applying any payment rules of its own.
"""

from shared.config import get_settings
from shared.errors import TranslationError
from shared.events.ordering import OrderSubmittedIntegrationEvent
from shared.events.payments import PaymentCompletedIntegrationEvent, PaymentFailedIntegrationEvent
from shared.messaging import read_event

from payments.payment.creation import CreatePayment
from payments.payment.events import PaymentCompleted, PaymentFailed
from payments.payment.identifiers import CustomerReference, OrderReference, PaymentId
from payments.payment.status import PaymentMethod


class PaymentCompletedTranslator:
    def to_integration_event(self, event: PaymentCompleted) -> PaymentCompletedIntegrationEvent:
        if not isinstance(event, PaymentCompleted):
            raise TranslationError(f"Expected PaymentCompleted, got {type(event).__name__}")
        return read_event(
            PaymentCompletedIntegrationEvent,
            {
                "payment_id": PaymentId.from_raw(str(event.payment_id)).raw(),
                "order_id": OrderReference.from_raw(str(event.order_id)).raw(),
                "amount": event.amount,
                "paid_at": event.completed_at,
            },
        )


class PaymentFailedTranslator:
    def to_integration_event(self, event: PaymentFailed) -> PaymentFailedIntegrationEvent:
        if not isinstance(event, PaymentFailed):
            raise TranslationError(f"Expected PaymentFailed, got {type(event).__name__}")
        return read_event(
            PaymentFailedIntegrationEvent,
            {
                "payment_id": PaymentId.from_raw(str(event.payment_id)).raw(),
                "order_id": OrderReference.from_raw(str(event.order_id)).raw(),
                "reason": event.reason,
            },
        )


class OrderSubmittedTranslator:
    def __init__(self, payment_method: str | None = None, capture: bool = False):
        self.payment_method = payment_method
        self.capture = capture

    def to_command(self, event) -> CreatePayment:
        event = read_event(OrderSubmittedIntegrationEvent, event)
        method = self.payment_method or get_settings().default_payment_method
        try:
            method = PaymentMethod(method)
        except ValueError as exc:
            raise TranslationError(f"Unknown payment method {method!r}", field="method") from exc

        return CreatePayment(
            order_id=OrderReference.from_raw(str(event.order_id)).raw(),
            customer_id=CustomerReference.from_raw(str(event.customer_id)).raw(),
            amount=event.total_amount,
            currency=event.currency,
            method=method.value,
            capture=self.capture,
        )
