"""Read-side queries over payments."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from shared.config import get_settings
from shared.errors import TranslationError

from payments.payment.payment import Payment
from payments.payment.status import PaymentStatus


def _payments():
    return current_domain.repository_for(Payment)


def get_payment_by_id(payment_id: str) -> Payment:
    return _payments().get(payment_id)


def get_payment_by_order_id(order_id: str) -> Payment:
    payment = _payments().by_order(order_id)
    if payment is None:
        raise ObjectNotFoundError(f"No payment found for order {order_id}")
    return payment


def get_payments_by_customer(customer_id: str) -> list[Payment]:
    return _payments().by_customer(customer_id)


def get_payments_by_status(status: PaymentStatus | str) -> list[Payment]:
    try:
        status = PaymentStatus(status)
    except ValueError as exc:
        raise TranslationError(f"Unknown payment status {status!r}", field="status") from exc
    return _payments().by_status(status)


def get_pending_payments() -> list[Payment]:
    return _payments().pending()


def get_high_value_payments(threshold: float | None = None) -> list[Payment]:
    return _payments().high_value(threshold if threshold is not None else get_settings().high_value_payment_threshold)


def get_failed_payments() -> list[Payment]:
    return _payments().failed()


def get_refundable_payments() -> list[Payment]:
    return _payments().refundable()
