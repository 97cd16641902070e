"""Payment repository: load, write and query payments by specification."""

from protean.exceptions import ObjectNotFoundError
from shared.errors import ConcurrencyConflictError
from shared.specification import Specification

from payments.domain import payments
from payments.payment.payment import Payment
from payments.payment.specifications import (
    FailedPaymentSpecification,
    HighValuePaymentSpecification,
    PaymentsByCustomerSpecification,
    PaymentsByOrderSpecification,
    PaymentsByStatusSpecification,
    PendingPaymentSpecification,
    RefundablePaymentSpecification,
)
from payments.payment.status import PaymentStatus


@payments.repository(part_of=Payment)
class PaymentRepository:
    def exists(self, payment_id: str) -> bool:
        try:
            self._dao.get(payment_id)
        except ObjectNotFoundError:
            return False
        return True

    def insert(self, payment: Payment) -> Payment:
        if self.exists(str(payment.id)):
            raise ConcurrencyConflictError("Payment", str(payment.id), None, payment.version)
        return self.add(payment)

    def update(self, payment: Payment) -> Payment:
        if not self.exists(str(payment.id)):
            raise ObjectNotFoundError(f"Payment {payment.id} does not exist")
        return self.add(payment)

    def remove(self, payment: Payment) -> None:
        self._dao.delete(payment)

    def delete(self, payment_id: str) -> None:
        self.remove(self.get(payment_id))

    def find(self, specification: Specification) -> list[Payment]:
        if not specification.pushdown:
            return [payment for payment in self._dao.query.all().items if specification.is_satisfied_by(payment)]
        return self._dao.query.filter(specification.to_query()).all().items

    def by_order(self, order_id: str) -> Payment | None:
        """The most recent payment opened for an order, if any."""
        found = self.find(PaymentsByOrderSpecification(order_id))
        if not found:
            return None
        return max(found, key=lambda payment: payment.created_at)

    def by_customer(self, customer_id: str) -> list[Payment]:
        return self.find(PaymentsByCustomerSpecification(customer_id))

    def by_status(self, status: PaymentStatus) -> list[Payment]:
        return self.find(PaymentsByStatusSpecification(status))

    def pending(self) -> list[Payment]:
        return self.find(PendingPaymentSpecification())

    def failed(self) -> list[Payment]:
        return self.find(FailedPaymentSpecification())

    def refundable(self) -> list[Payment]:
        return self.find(RefundablePaymentSpecification())

    def high_value(self, threshold: float) -> list[Payment]:
        return self.find(HighValuePaymentSpecification(threshold))
