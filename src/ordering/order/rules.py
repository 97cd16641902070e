"""Guard rules for the Order aggregate."""

from shared.rules import BusinessRule

from ordering.order.status import OrderStatus, can_be_cancelled, can_be_modified, can_transition


class OrderMustBeModifiableRule(BusinessRule):
    code = "ORDER_NOT_MODIFIABLE"

    def __init__(self, status: OrderStatus):
        self.status = status

    def is_broken(self) -> bool:
        return not can_be_modified(self.status)

    @property
    def message(self) -> str:
        return f"Order cannot be modified in {self.status.value} status"


class OrderCannotExceedMaxItemsRule(BusinessRule):
    code = "ORDER_MAX_ITEMS_EXCEEDED"

    def __init__(self, current_count: int, max_items: int):
        self.current_count = current_count
        self.max_items = max_items

    def is_broken(self) -> bool:
        return self.current_count >= self.max_items

    @property
    def message(self) -> str:
        return f"Order cannot have more than {self.max_items} items"


class ItemQuantityMustBePositiveRule(BusinessRule):
    code = "INVALID_ITEM_QUANTITY"

    def __init__(self, quantity: int):
        self.quantity = quantity

    def is_broken(self) -> bool:
        return self.quantity is None or self.quantity <= 0

    @property
    def message(self) -> str:
        return f"Item quantity must be greater than zero, got {self.quantity}"


class DiscountCannotExceedSubtotalRule(BusinessRule):
    code = "INVALID_ITEM_DISCOUNT"

    def __init__(self, discount: float, subtotal: float):
        self.discount = discount
        self.subtotal = subtotal

    def is_broken(self) -> bool:
        return self.discount < 0 or self.discount > self.subtotal

    @property
    def message(self) -> str:
        return f"Discount {self.discount:.2f} must be between 0 and the item subtotal {self.subtotal:.2f}"


class OrderItemMustExistRule(BusinessRule):
    code = "ORDER_ITEM_NOT_FOUND"

    def __init__(self, item, item_id: str):
        self.item = item
        self.item_id = item_id

    def is_broken(self) -> bool:
        return self.item is None

    @property
    def message(self) -> str:
        return f"Order item {self.item_id} does not exist"


class OrderMustHaveItemsRule(BusinessRule):
    code = "ORDER_EMPTY"

    def __init__(self, item_count: int):
        self.item_count = item_count

    def is_broken(self) -> bool:
        return self.item_count == 0

    @property
    def message(self) -> str:
        return "Cannot submit an order without items"


class OrderMustMeetMinimumValueRule(BusinessRule):
    code = "ORDER_BELOW_MINIMUM_VALUE"

    def __init__(self, total: float, minimum: float, currency: str):
        self.total = total
        self.minimum = minimum
        self.currency = currency

    def is_broken(self) -> bool:
        return self.total < self.minimum

    @property
    def message(self) -> str:
        return (
            f"Order total {self.total:.2f} {self.currency} is below the minimum order value "
            f"of {self.minimum:.2f} {self.currency}"
        )


class OrderMustBeCancellableRule(BusinessRule):
    code = "ORDER_CANNOT_BE_CANCELLED"

    def __init__(self, status: OrderStatus):
        self.status = status

    def is_broken(self) -> bool:
        return not can_be_cancelled(self.status)

    @property
    def message(self) -> str:
        return f"Order in {self.status.value} status cannot be cancelled"


class OrderStatusTransitionRule(BusinessRule):
    code = "ORDER_INVALID_STATUS_TRANSITION"

    def __init__(self, current: OrderStatus, target: OrderStatus):
        self.current = current
        self.target = target

    def is_broken(self) -> bool:
        return not can_transition(self.current, self.target)

    @property
    def message(self) -> str:
        return f"Cannot transition order from {self.current.value} to {self.target.value}"
