"""Payment lifecycle states and payment methods.

    PENDING → PROCESSING → COMPLETED → REFUNDED
    PROCESSING → FAILED
    PENDING → FAILED / CANCELLED
"""

from enum import Enum


class PaymentStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REFUNDED = "Refunded"
    CANCELLED = "Cancelled"


class PaymentMethod(Enum):
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    BANK_TRANSFER = "BankTransfer"
    PAYPAL = "PayPal"
    CRYPTOCURRENCY = "Cryptocurrency"


CARD_METHODS = frozenset({PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD})

_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PROCESSING, PaymentStatus.FAILED, PaymentStatus.CANCELLED},
    PaymentStatus.PROCESSING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),  # Terminal
    PaymentStatus.REFUNDED: set(),  # Terminal
    PaymentStatus.CANCELLED: set(),  # Terminal
}


def can_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    return target in _VALID_TRANSITIONS.get(current, set())


def can_be_processed(status: PaymentStatus) -> bool:
    return status == PaymentStatus.PENDING


def can_be_refunded(status: PaymentStatus) -> bool:
    return status == PaymentStatus.COMPLETED


def can_be_cancelled(status: PaymentStatus) -> bool:
    return status == PaymentStatus.PENDING


def requires_card_details(method: PaymentMethod) -> bool:
    return method in CARD_METHODS
