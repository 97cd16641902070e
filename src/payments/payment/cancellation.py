"""Cancelling a payment that never reached the gateway."""

from protean import handle
from protean.fields import Identifier, String
from shared.context import current_context

from payments.domain import payments
from payments.payment.payment import Payment


@payments.command(part_of="Payment")
class CancelPayment:
    payment_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@payments.command_handler(part_of=Payment)
class CancelPaymentHandler:
    @handle(CancelPayment)
    def cancel_payment(self, command):
        with current_context().unit_of_work() as uow:
            payment = uow.load(Payment, command.payment_id)
            payment.cancel(command.reason)
            uow.save_entities()
