"""Guard rules for the Payment aggregate."""

from datetime import UTC, datetime

from shared.rules import BusinessRule

from payments.payment.status import (
    PaymentMethod,
    PaymentStatus,
    can_be_processed,
    can_be_refunded,
    can_transition,
    requires_card_details,
)


class PaymentAmountMustBePositiveRule(BusinessRule):
    code = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, amount: float | None):
        self.amount = amount

    def is_broken(self) -> bool:
        return self.amount is None or self.amount <= 0

    @property
    def message(self) -> str:
        return f"Payment amount must be positive, got {self.amount}"


class CardDetailsRequiredRule(BusinessRule):
    code = "CARD_DETAILS_REQUIRED"

    def __init__(self, method: PaymentMethod, card_details):
        self.method = method
        self.card_details = card_details

    def is_broken(self) -> bool:
        return requires_card_details(self.method) and self.card_details is None

    @property
    def message(self) -> str:
        return f"Card details are required for {self.method.value} payments"


class CardMustNotBeExpiredRule(BusinessRule):
    code = "CARD_EXPIRED"

    def __init__(self, expiry_month: int, expiry_year: int, today: datetime | None = None):
        self.expiry_month = expiry_month
        self.expiry_year = expiry_year
        self.today = today or datetime.now(UTC)

    def is_broken(self) -> bool:
        return (self.expiry_year, self.expiry_month) < (self.today.year, self.today.month)

    @property
    def message(self) -> str:
        return f"Card expired in {self.expiry_month:02d}/{self.expiry_year}"


class PaymentMustBeProcessableRule(BusinessRule):
    code = "PAYMENT_NOT_PROCESSABLE"

    def __init__(self, status: PaymentStatus):
        self.status = status

    def is_broken(self) -> bool:
        return not can_be_processed(self.status)

    @property
    def message(self) -> str:
        return f"Cannot process payment in {self.status.value} status"


class PaymentMustBeRefundableRule(BusinessRule):
    code = "PAYMENT_NOT_REFUNDABLE"

    def __init__(self, status: PaymentStatus):
        self.status = status

    def is_broken(self) -> bool:
        return not can_be_refunded(self.status)

    @property
    def message(self) -> str:
        return f"Cannot refund payment in {self.status.value} status"


class PaymentStatusTransitionRule(BusinessRule):
    code = "PAYMENT_INVALID_STATUS_TRANSITION"

    def __init__(self, current: PaymentStatus, target: PaymentStatus):
        self.current = current
        self.target = target

    def is_broken(self) -> bool:
        return not can_transition(self.current, self.target)

    @property
    def message(self) -> str:
        return f"Cannot transition payment from {self.current.value} to {self.target.value}"
