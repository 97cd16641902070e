"""Payment aggregate.

A payment is opened for an order in Pending, handed to the gateway
(Processing), and ends Completed, Failed or Cancelled. Only a completed
payment can be refunded. Card details hold the last four digits only, never
the full card number.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, ValueObject
from shared.rules import RequiredValueRule, check_rule

from payments.domain import payments
from payments.payment.events import (
    PaymentCancelled,
    PaymentCompleted,
    PaymentCreated,
    PaymentFailed,
    PaymentProcessingStarted,
    PaymentRefunded,
)
from payments.payment.identifiers import CustomerReference, OrderReference, PaymentId
from payments.payment.rules import (
    CardDetailsRequiredRule,
    CardMustNotBeExpiredRule,
    PaymentAmountMustBePositiveRule,
    PaymentMustBeProcessableRule,
    PaymentMustBeRefundableRule,
    PaymentStatusTransitionRule,
)
from payments.payment.status import PaymentMethod, PaymentStatus, requires_card_details


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@payments.value_object(part_of="Payment")
class Money:
    """Monetary amount with currency."""

    amount = Float(required=True, min_value=0.0)
    currency = String(required=True, max_length=3)

    @invariant.post
    def currency_must_be_an_iso_code(self):
        if not (self.currency and len(self.currency) == 3 and self.currency.isalpha() and self.currency.isupper()):
            raise ValidationError({"currency": [f"Invalid currency code: {self.currency!r}"]})

    @classmethod
    def of(cls, amount: float, currency: str) -> "Money":
        if not currency or not str(currency).strip():
            raise ValidationError({"currency": ["Currency is required"]})
        return cls(amount=round(float(amount), 2), currency=str(currency).strip().upper())


@payments.value_object(part_of="Payment")
class CardDetails:
    """Masked card data.

    Structure is checked on every construction. Expiry is checked against
    today's date only by ``build()``, when the card is first captured, and
    again when processing starts: a stored card that has since expired must
    still load.
    """

    last4 = String(required=True, max_length=4)
    card_type = String(required=True, max_length=30)
    expiry_month = Integer(required=True, min_value=1, max_value=12)
    expiry_year = Integer(required=True, min_value=2000)
    holder_name = String(required=True, max_length=200)

    @invariant.post
    def last4_must_be_four_digits(self):
        if not (self.last4 and len(self.last4) == 4 and self.last4.isdigit()):
            raise ValidationError({"last4": ["Card last four digits must be exactly 4 digits"]})

    @classmethod
    def build(
        cls,
        last4: str,
        card_type: str,
        expiry_month: int,
        expiry_year: int,
        holder_name: str,
    ) -> "CardDetails":
        if expiry_month is not None and expiry_year is not None:
            check_rule(CardMustNotBeExpiredRule(expiry_month, expiry_year))
        return cls(
            last4=last4,
            card_type=card_type,
            expiry_month=expiry_month,
            expiry_year=expiry_year,
            holder_name=holder_name,
        )

    def is_expired(self, today: datetime | None = None) -> bool:
        return CardMustNotBeExpiredRule(self.expiry_month, self.expiry_year, today).is_broken()

    def masked(self) -> str:
        return f"**** **** **** {self.last4}"


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@payments.aggregate
class Payment:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = ValueObject(Money, required=True)
    status = String(max_length=20, choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    method = String(max_length=20, choices=PaymentMethod, required=True)
    card_details = ValueObject(CardDetails)
    transaction_id = String(max_length=255)
    failure_reason = String(max_length=500)
    refund_reason = String(max_length=500)
    version = Integer(default=0)
    created_at = DateTime()
    processed_at = DateTime()
    completed_at = DateTime()
    failed_at = DateTime()
    refunded_at = DateTime()
    cancelled_at = DateTime()

    @invariant.post
    def amount_must_be_positive(self):
        if self.amount is None or self.amount.amount <= 0:
            raise ValidationError({"amount": ["Payment amount must be positive"]})

    @invariant.post
    def card_details_required_for_card_methods(self):
        if requires_card_details(PaymentMethod(self.method)) and self.card_details is None:
            raise ValidationError({"card_details": [f"Card details are required for {self.method} payments"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create_for_order(
        cls,
        order_id: OrderReference,
        customer_id: CustomerReference,
        amount: Money,
        method: PaymentMethod,
        card_details: CardDetails | None = None,
    ) -> "Payment":
        check_rule(RequiredValueRule(order_id, "ORDER_REFERENCE_REQUIRED", "Order reference"))
        check_rule(RequiredValueRule(customer_id, "CUSTOMER_REFERENCE_REQUIRED", "Customer reference"))
        check_rule(PaymentAmountMustBePositiveRule(amount.amount if amount is not None else None))
        check_rule(CardDetailsRequiredRule(method, card_details))

        now = datetime.now(UTC)
        payment = cls(
            order_id=order_id.raw(),
            customer_id=customer_id.raw(),
            amount=amount,
            status=PaymentStatus.PENDING.value,
            method=method.value,
            card_details=card_details,
            version=0,
            created_at=now,
        )
        payment.raise_(
            PaymentCreated(
                payment_id=str(payment.id),
                order_id=payment.order_id,
                customer_id=payment.customer_id,
                amount=amount.amount,
                currency=amount.currency,
                method=method.value,
                created_at=now,
            )
        )
        return payment

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def payment_id(self) -> PaymentId:
        return PaymentId.from_raw(str(self.id))

    def payment_status(self) -> PaymentStatus:
        return PaymentStatus(self.status)

    def payment_method(self) -> PaymentMethod:
        return PaymentMethod(self.method)

    def _transition_to(self, target: PaymentStatus) -> None:
        check_rule(PaymentStatusTransitionRule(self.payment_status(), target))

    def _touch(self) -> None:
        self.version = (self.version or 0) + 1

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def start_processing(self) -> PaymentProcessingStarted:
        check_rule(PaymentMustBeProcessableRule(self.payment_status()))
        # Time has passed since the card was captured
        if self.card_details is not None:
            check_rule(CardMustNotBeExpiredRule(self.card_details.expiry_month, self.card_details.expiry_year))

        now = datetime.now(UTC)
        self.status = PaymentStatus.PROCESSING.value
        self.processed_at = now
        self._touch()

        event = PaymentProcessingStarted(payment_id=str(self.id), order_id=str(self.order_id), processed_at=now)
        self.raise_(event)
        return event

    def complete(self, transaction_id: str) -> PaymentCompleted:
        self._transition_to(PaymentStatus.COMPLETED)
        check_rule(RequiredValueRule(transaction_id, "TRANSACTION_ID_REQUIRED", "Transaction id"))

        now = datetime.now(UTC)
        self.status = PaymentStatus.COMPLETED.value
        self.transaction_id = transaction_id
        self.completed_at = now
        self._touch()

        event = PaymentCompleted(
            payment_id=str(self.id),
            order_id=str(self.order_id),
            amount=self.amount.amount,
            currency=self.amount.currency,
            transaction_id=transaction_id,
            completed_at=now,
        )
        self.raise_(event)
        return event

    def fail(self, reason: str) -> PaymentFailed:
        self._transition_to(PaymentStatus.FAILED)
        check_rule(RequiredValueRule(reason, "FAILURE_REASON_REQUIRED", "Failure reason"))

        now = datetime.now(UTC)
        self.status = PaymentStatus.FAILED.value
        self.failure_reason = reason
        self.failed_at = now
        self._touch()

        event = PaymentFailed(payment_id=str(self.id), order_id=str(self.order_id), reason=reason, failed_at=now)
        self.raise_(event)
        return event

    def refund(self, reason: str) -> PaymentRefunded:
        check_rule(PaymentMustBeRefundableRule(self.payment_status()))
        check_rule(RequiredValueRule(reason, "REFUND_REASON_REQUIRED", "Refund reason"))

        now = datetime.now(UTC)
        self.status = PaymentStatus.REFUNDED.value
        self.refund_reason = reason
        self.refunded_at = now
        self._touch()

        event = PaymentRefunded(
            payment_id=str(self.id),
            order_id=str(self.order_id),
            amount=self.amount.amount,
            reason=reason,
            refunded_at=now,
        )
        self.raise_(event)
        return event

    def cancel(self, reason: str) -> PaymentCancelled:
        self._transition_to(PaymentStatus.CANCELLED)
        check_rule(RequiredValueRule(reason, "CANCELLATION_REASON_REQUIRED", "Cancellation reason"))

        now = datetime.now(UTC)
        self.status = PaymentStatus.CANCELLED.value
        self.failure_reason = reason
        self.cancelled_at = now
        self._touch()

        event = PaymentCancelled(payment_id=str(self.id), order_id=str(self.order_id), reason=reason, cancelled_at=now)
        self.raise_(event)
        return event
