"""Order cancellation: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from shared.context import current_context

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.cancel(command.reason)
            uow.save_entities()
