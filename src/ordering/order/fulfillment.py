"""Moving a paid order through processing, shipping and delivery."""

from protean import handle
from protean.fields import Identifier
from shared.context import current_context

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.command(part_of="Order")
class StartOrderProcessing:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class ShipOrder:
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class DeliverOrder:
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(StartOrderProcessing)
    def start_processing(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.start_processing()
            uow.save_entities()

    @handle(ShipOrder)
    def ship(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.ship()
            uow.save_entities()

    @handle(DeliverOrder)
    def deliver(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.mark_as_delivered()
            uow.save_entities()
