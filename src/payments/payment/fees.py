"""Payment validation and processing fees."""

from dataclasses import dataclass

from payments.payment.payment import Money, Payment
from payments.payment.status import PaymentMethod

_FEE_RATES = {
    PaymentMethod.CREDIT_CARD: 0.029,
    PaymentMethod.DEBIT_CARD: 0.015,
    PaymentMethod.PAYPAL: 0.034,
    PaymentMethod.BANK_TRANSFER: 0.005,
}
DEFAULT_FEE_RATE = 0.03


@dataclass(frozen=True)
class PaymentValidationResult:
    is_valid: bool
    error_message: str | None = None

    @classmethod
    def success(cls) -> "PaymentValidationResult":
        return cls(is_valid=True)

    @classmethod
    def failure(cls, message: str) -> "PaymentValidationResult":
        return cls(is_valid=False, error_message=message)


class PaymentProcessingService:
    def validate_payment(self, payment: Payment) -> PaymentValidationResult:
        if payment.amount.amount <= 0:
            return PaymentValidationResult.failure("Payment amount must be positive")
        if payment.card_details is not None and payment.card_details.is_expired():
            return PaymentValidationResult.failure("Card has expired")
        return PaymentValidationResult.success()

    def calculate_processing_fee(self, amount: Money, method: PaymentMethod) -> Money:
        rate = _FEE_RATES.get(method, DEFAULT_FEE_RATE)
        return Money.of(round(amount.amount * rate, 2), amount.currency)
