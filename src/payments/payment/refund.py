"""Refunding a completed payment."""

from protean import handle
from protean.fields import Identifier, String
from shared.context import current_context

from payments.domain import payments
from payments.payment.payment import Payment


@payments.command(part_of="Payment")
class RefundPayment:
    payment_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@payments.command_handler(part_of=Payment)
class RefundPaymentHandler:
    @handle(RefundPayment)
    def refund_payment(self, command):
        with current_context().unit_of_work() as uow:
            payment = uow.load(Payment, command.payment_id)
            payment.refund(command.reason)
            uow.save_entities()
