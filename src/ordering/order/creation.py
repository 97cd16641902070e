"""Order creation: commands and handler."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from shared.context import current_context

from ordering.domain import ordering
from ordering.order.factory import CreateOrderData, OrderFactory, OrderItemData
from ordering.order.identifiers import CustomerId, ProductId
from ordering.order.order import Address, Money, Order
from ordering.order.translators import ExternalOrderTranslator


@ordering.command(part_of="Order")
class CreateOrder:
    customer_id = Identifier(required=True)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    country = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    currency = String(max_length=3, default="USD")
    notes = Text()
    items = Text()  # JSON: optional list of item dicts


@ordering.command(part_of="Order")
class PlaceExternalOrder:
    """Create an order from a payload produced by an external sales channel."""

    external_payload = Text(required=True)  # JSON, validated by ExternalOrderTranslator


def _item_data(raw: dict, currency: str) -> OrderItemData:
    discount = raw.get("discount")
    return OrderItemData(
        product_id=ProductId.from_raw(raw["product_id"]),
        product_name=raw["product_name"],
        unit_price=Money.of(raw["unit_price"], currency),
        quantity=int(raw["quantity"]),
        discount=Money.of(discount, currency) if discount else None,
    )


@ordering.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        context = current_context()
        customer_id = CustomerId.from_raw(command.customer_id)
        address = Address(
            street=command.street,
            city=command.city,
            state=command.state,
            country=command.country,
            zip_code=command.zip_code,
        )
        currency = (command.currency or "USD").upper()

        items = json.loads(command.items) if command.items else []
        if items:
            order = OrderFactory(max_items=context.settings.max_order_items).create(
                CreateOrderData(
                    customer_id=customer_id,
                    shipping_address=address,
                    currency=currency,
                    items=tuple(_item_data(item, currency) for item in items),
                    notes=command.notes,
                )
            )
        else:
            order = Order.create(customer_id, address, currency)
            if command.notes:
                order.set_notes(command.notes)

        with context.unit_of_work() as uow:
            uow.register(order)
            uow.save_entities()
        return str(order.id)

    @handle(PlaceExternalOrder)
    def place_external_order(self, command):
        context = current_context()
        data = ExternalOrderTranslator().translate(command.external_payload)
        order = OrderFactory(max_items=context.settings.max_order_items).create(data)

        with context.unit_of_work() as uow:
            uow.register(order)
            uow.save_entities()
        return str(order.id)
