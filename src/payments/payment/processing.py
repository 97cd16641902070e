"""Driving a payment through the gateway: process, complete, fail, capture."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from shared.context import current_context

from payments.domain import payments
from payments.gateway import get_gateway
from payments.payment.payment import Payment

logger = structlog.get_logger(__name__)


def settle_with_gateway(payment) -> None:
    """Process ``payment`` and complete or fail it with the gateway's answer.

    A gateway outage raises InfrastructureError and nothing should be saved.
    """
    payment.start_processing()
    card = payment.card_details
    result = get_gateway().capture(
        payment_id=str(payment.id),
        amount=payment.amount.amount,
        currency=payment.amount.currency,
        method=payment.method,
        last4=card.last4 if card else None,
    )
    if result.success:
        payment.complete(result.transaction_id)
    else:
        logger.warning(
            "Gateway declined payment",
            payment_id=str(payment.id),
            order_id=str(payment.order_id),
            reason=result.failure_reason,
        )
        payment.fail(result.failure_reason or "Declined by gateway")


@payments.command(part_of="Payment")
class ProcessPayment:
    payment_id = Identifier(required=True)


@payments.command(part_of="Payment")
class CompletePayment:
    payment_id = Identifier(required=True)
    transaction_id = String(required=True, max_length=255)


@payments.command(part_of="Payment")
class FailPayment:
    payment_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@payments.command(part_of="Payment")
class CapturePayment:
    """Process a pending payment and settle it with the gateway in one step."""

    payment_id = Identifier(required=True)


@payments.command_handler(part_of=Payment)
class PaymentProcessingHandler:
    @handle(ProcessPayment)
    def process_payment(self, command):
        with current_context().unit_of_work() as uow:
            payment = uow.load(Payment, command.payment_id)
            payment.start_processing()
            uow.save_entities()

    @handle(CompletePayment)
    def complete_payment(self, command):
        with current_context().unit_of_work() as uow:
            payment = uow.load(Payment, command.payment_id)
            payment.complete(command.transaction_id)
            uow.save_entities()

    @handle(FailPayment)
    def fail_payment(self, command):
        with current_context().unit_of_work() as uow:
            payment = uow.load(Payment, command.payment_id)
            payment.fail(command.reason)
            uow.save_entities()

    @handle(CapturePayment)
    def capture_payment(self, command):
        """Gateway outages abort the whole capture and leave the payment Pending."""
        with current_context().unit_of_work() as uow:
            payment = uow.load(Payment, command.payment_id)
            settle_with_gateway(payment)
            uow.save_entities()
        return payment.status
