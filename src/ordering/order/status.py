"""Order lifecycle states and the transition predicates that go with them.

    DRAFT → SUBMITTED → PAID → PROCESSING → SHIPPED → DELIVERED
    SUBMITTED → PAYMENT_FAILED
    DRAFT / SUBMITTED / PAYMENT_FAILED → CANCELLED

DELIVERED and CANCELLED are terminal.
"""

from enum import Enum


class OrderStatus(Enum):
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    PAID = "Paid"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    PAYMENT_FAILED = "PaymentFailed"


_VALID_TRANSITIONS = {
    OrderStatus.DRAFT: {OrderStatus.SUBMITTED, OrderStatus.CANCELLED},
    OrderStatus.SUBMITTED: {OrderStatus.PAID, OrderStatus.PAYMENT_FAILED, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.PAYMENT_FAILED: {OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

CANCELLABLE_STATES = frozenset({OrderStatus.DRAFT, OrderStatus.SUBMITTED, OrderStatus.PAYMENT_FAILED})
TERMINAL_STATES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS.get(current, set())


def can_be_modified(status: OrderStatus) -> bool:
    return status == OrderStatus.DRAFT


def can_be_submitted(status: OrderStatus) -> bool:
    return status == OrderStatus.DRAFT


def can_be_cancelled(status: OrderStatus) -> bool:
    return status in CANCELLABLE_STATES


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATES
