"""Submitting a draft order: the trigger of the checkout saga."""

from protean import handle
from protean.fields import Identifier
from shared.context import current_context

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class SubmitOrder:
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class SubmitOrderHandler:
    @handle(SubmitOrder)
    def submit_order(self, command):
        context = current_context()
        with context.unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            event = order.submit(minimum_order_value=context.settings.min_order_value)
            uow.save_entities()
        return event.total_amount
