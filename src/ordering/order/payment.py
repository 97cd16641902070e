"""Recording the payment outcome reported by the Payments context."""

from protean import handle
from protean.fields import DateTime, Identifier, String
from shared.context import current_context

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class MarkOrderAsPaid:
    order_id = Identifier(required=True)
    paid_at = DateTime(required=True)


@ordering.command(part_of="Order")
class MarkOrderPaymentFailed:
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@ordering.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(MarkOrderAsPaid)
    def mark_as_paid(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.mark_as_paid(command.paid_at)
            uow.save_entities()

    @handle(MarkOrderPaymentFailed)
    def mark_payment_failed(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.mark_payment_failed(command.reason)
            uow.save_entities()
