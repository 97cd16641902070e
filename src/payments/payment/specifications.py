"""Reusable predicates over payments, usable in memory and as repository queries."""

from shared.specification import Field, Specification

from payments.payment.status import PaymentStatus

HIGH_VALUE_THRESHOLD = 1000.0


class PendingPaymentSpecification(Specification):
    def predicate(self):
        return Field("status") == PaymentStatus.PENDING.value


class FailedPaymentSpecification(Specification):
    def predicate(self):
        return Field("status") == PaymentStatus.FAILED.value


class RefundablePaymentSpecification(Specification):
    def predicate(self):
        return Field("status") == PaymentStatus.COMPLETED.value


class HighValuePaymentSpecification(Specification):
    """Payments at or above ``threshold``, whatever their status."""

    def __init__(self, threshold: float = HIGH_VALUE_THRESHOLD):
        self.threshold = threshold

    def predicate(self):
        return Field("amount.amount") >= self.threshold

    def __repr__(self):
        return f"HighValuePaymentSpecification(threshold={self.threshold})"


class PaymentsByOrderSpecification(Specification):
    def __init__(self, order_id: str):
        self.order_id = order_id

    def predicate(self):
        return Field("order_id") == self.order_id


class PaymentsByCustomerSpecification(Specification):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id

    def predicate(self):
        return Field("customer_id") == self.customer_id


class PaymentsByStatusSpecification(Specification):
    def __init__(self, status: PaymentStatus):
        self.status = status

    def predicate(self):
        return Field("status") == self.status.value
