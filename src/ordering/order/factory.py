"""Building fully populated draft orders in one step."""

from dataclasses import dataclass, field

from shared.errors import BusinessRuleViolationError

from ordering.order.identifiers import CustomerId, ProductId
from ordering.order.order import Address, Money, Order


@dataclass(frozen=True)
class OrderItemData:
    product_id: ProductId
    product_name: str
    unit_price: Money
    quantity: int
    discount: Money | None = None


@dataclass(frozen=True)
class CreateOrderData:
    customer_id: CustomerId
    shipping_address: Address
    currency: str = "USD"
    items: tuple[OrderItemData, ...] = field(default_factory=tuple)
    notes: str | None = None


class OrderFactory:
    """Creates a draft order and adds its lines through the aggregate's own behavior.

    Going through ``add_item`` keeps every guard rule in force, including
    merging repeated products.
    """

    def __init__(self, max_items: int = 100):
        self.max_items = max_items

    def create(self, data: CreateOrderData) -> Order:
        self._validate(data)

        order = Order.create(data.customer_id, data.shipping_address, data.currency)
        for item in data.items:
            order.add_item(
                item.product_id,
                item.product_name,
                item.unit_price,
                item.quantity,
                discount=item.discount,
                max_items=self.max_items,
            )
        if data.notes and data.notes.strip():
            order.set_notes(data.notes.strip())
        return order

    def _validate(self, data: CreateOrderData) -> None:
        if not data.items:
            raise BusinessRuleViolationError("ORDER_EMPTY", "Order must have at least one item")
        if len(data.items) > self.max_items:
            raise BusinessRuleViolationError(
                "ORDER_MAX_ITEMS_EXCEEDED", f"Order cannot have more than {self.max_items} items"
            )
        for item in data.items:
            if item.unit_price.amount <= 0:
                raise BusinessRuleViolationError(
                    "INVALID_UNIT_PRICE", f"Unit price must be positive for {item.product_name}"
                )
