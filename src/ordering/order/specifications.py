"""Reusable predicates over orders.

Each specification works both as an in-memory check
(``spec.is_satisfied_by(order)``) and as a repository query
(``OrderRepository.find(spec)``).
"""

from datetime import UTC, datetime, timedelta

from shared.specification import Field, Specification

from ordering.order.status import CANCELLABLE_STATES, OrderStatus


class CancellableOrderSpecification(Specification):
    def predicate(self):
        return Field("status").is_in(status.value for status in CANCELLABLE_STATES)


class OrderReadyForProcessingSpecification(Specification):
    def predicate(self):
        return Field("status") == OrderStatus.PAID.value


class PendingOrderSpecification(Specification):
    """Submitted orders still waiting for their payment outcome."""

    def predicate(self):
        return Field("status") == OrderStatus.SUBMITTED.value


class OverdueOrderSpecification(Specification):
    """Submitted orders whose payment has not arrived within ``hours``."""

    def __init__(self, hours: int = 24, now: datetime | None = None):
        self.hours = hours
        self.now = now

    @property
    def cutoff(self) -> datetime:
        return (self.now or datetime.now(UTC)) - timedelta(hours=self.hours)

    def predicate(self):
        return (Field("status") == OrderStatus.SUBMITTED.value) & (Field("submitted_at") < self.cutoff)

    def __repr__(self):
        return f"OverdueOrderSpecification(hours={self.hours})"


class MinimumOrderValueSpecification(Specification):
    def __init__(self, minimum_value: float):
        self.minimum_value = minimum_value

    def predicate(self):
        return Field("total_amount") >= self.minimum_value


class OrdersByCustomerSpecification(Specification):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id

    def predicate(self):
        return Field("customer_id") == self.customer_id


class OrdersByStatusSpecification(Specification):
    def __init__(self, status: OrderStatus):
        self.status = status

    def predicate(self):
        return Field("status") == self.status.value


class MaxItemsCountSpecification(Specification):
    """Orders holding at most ``max_items`` lines.

    Line items live in their own records, so this one is evaluated in memory
    only.
    """

    pushdown = False

    def __init__(self, max_items: int):
        self.max_items = max_items

    def is_satisfied_by(self, order) -> bool:
        return len(order.items) <= self.max_items
