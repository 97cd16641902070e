"""Pricing decisions that span a whole order."""

from ordering.order.order import Money, Order
from ordering.order.specifications import MinimumOrderValueSpecification
from ordering.order.status import OrderStatus

DISCOUNT_MINIMUM_ORDER_VALUE = 50.0
FREE_SHIPPING_THRESHOLD = 100.0


class OrderPricingService:
    def calculate_final_price(self, order: Order, discount_percentage: float = 0) -> Money:
        """Order total after a percentage discount.

        Percentages outside (0, 100] leave the total unchanged.
        """
        total = order.total()
        if 0 < discount_percentage <= 100:
            return total.subtract(total.multiply(discount_percentage / 100))
        return total

    def is_discount_applicable(self, order: Order, discount_code: str | None = None) -> bool:
        if discount_code is not None and not discount_code.strip():
            return False
        return order.order_status() == OrderStatus.DRAFT and MinimumOrderValueSpecification(
            DISCOUNT_MINIMUM_ORDER_VALUE
        ).is_satisfied_by(order)

    def qualifies_for_free_shipping(self, order: Order, threshold: float = FREE_SHIPPING_THRESHOLD) -> bool:
        return MinimumOrderValueSpecification(threshold).is_satisfied_by(order)
