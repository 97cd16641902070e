"""Order repository: load, write and query orders by specification."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from shared.errors import ConcurrencyConflictError
from shared.specification import Specification

from ordering.domain import ordering
from ordering.order.order import Order, OrderItem
from ordering.order.specifications import (
    CancellableOrderSpecification,
    OrdersByCustomerSpecification,
    OrdersByStatusSpecification,
    OverdueOrderSpecification,
    PendingOrderSpecification,
)
from ordering.order.status import OrderStatus


@ordering.repository(part_of=Order)
class OrderRepository:
    def exists(self, order_id: str) -> bool:
        try:
            self._dao.get(order_id)
        except ObjectNotFoundError:
            return False
        return True

    def insert(self, order: Order) -> Order:
        if self.exists(str(order.id)):
            raise ConcurrencyConflictError("Order", str(order.id), None, order.version)
        return self.add(order)

    def update(self, order: Order) -> Order:
        if not self.exists(str(order.id)):
            raise ObjectNotFoundError(f"Order {order.id} does not exist")
        return self.add(order)

    def remove(self, order: Order) -> None:
        """Delete an order together with its line items."""
        item_dao = current_domain.repository_for(OrderItem)._dao
        for item in order.items:
            item_dao.delete(item)
        self._dao.delete(order)

    def delete(self, order_id: str) -> None:
        self.remove(self.get(order_id))

    def find(self, specification: Specification) -> list[Order]:
        if not specification.pushdown:
            return [order for order in self._dao.query.all().items if specification.is_satisfied_by(order)]
        return self._dao.query.filter(specification.to_query()).all().items

    def by_customer(self, customer_id: str) -> list[Order]:
        return self.find(OrdersByCustomerSpecification(customer_id))

    def by_status(self, status: OrderStatus) -> list[Order]:
        return self.find(OrdersByStatusSpecification(status))

    def pending(self) -> list[Order]:
        return self.find(PendingOrderSpecification())

    def overdue(self, hours: int = 24) -> list[Order]:
        return self.find(OverdueOrderSpecification(hours=hours))

    def cancellable(self) -> list[Order]:
        return self.find(CancellableOrderSpecification())
