"""Editing a draft order: items, shipping address and notes."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from shared.context import current_context

from ordering.domain import ordering
from ordering.order.identifiers import ProductId
from ordering.order.order import Address, Money, Order


@ordering.command(part_of="Order")
class AddOrderItem:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True)
    discount = Float(default=0.0)


@ordering.command(part_of="Order")
class RemoveOrderItem:
    order_id = Identifier(required=True)
    item_id = Identifier(required=True)


@ordering.command(part_of="Order")
class UpdateOrderItemQuantity:
    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="Order")
class UpdateShippingAddress:
    order_id = Identifier(required=True)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    country = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)


@ordering.command(part_of="Order")
class SetOrderNotes:
    order_id = Identifier(required=True)
    notes = Text()


@ordering.command_handler(part_of=Order)
class ModifyOrderHandler:
    @handle(AddOrderItem)
    def add_item(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            discount = Money.of(command.discount, order.currency) if command.discount else None
            event = order.add_item(
                ProductId.from_raw(command.product_id),
                command.product_name,
                Money.of(command.unit_price, order.currency),
                command.quantity,
                discount=discount,
                max_items=current_context().settings.max_order_items,
            )
            uow.save_entities()
        return str(event.item_id)

    @handle(RemoveOrderItem)
    def remove_item(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.remove_item(command.item_id)
            uow.save_entities()

    @handle(UpdateOrderItemQuantity)
    def update_item_quantity(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.update_item_quantity(command.item_id, command.quantity)
            uow.save_entities()

    @handle(UpdateShippingAddress)
    def update_shipping_address(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.update_shipping_address(
                Address(
                    street=command.street,
                    city=command.city,
                    state=command.state,
                    country=command.country,
                    zip_code=command.zip_code,
                )
            )
            uow.save_entities()

    @handle(SetOrderNotes)
    def set_notes(self, command):
        with current_context().unit_of_work() as uow:
            order = uow.load(Order, command.order_id)
            order.set_notes(command.notes)
            uow.save_entities()
