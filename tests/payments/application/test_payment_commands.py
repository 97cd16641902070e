"""Application tests: Payment commands processed through the bounded context."""

import pytest
from payments.gateway import get_gateway
from payments.payment.cancellation import CancelPayment
from payments.payment.creation import CreatePayment
from payments.payment.payment import Payment
from payments.payment.processing import CapturePayment, CompletePayment, FailPayment, ProcessPayment
from payments.payment.refund import RefundPayment
from payments.payment.status import PaymentStatus
from protean import current_domain
from shared.errors import BusinessRuleViolationError, InfrastructureError
from shared.events.payments import PaymentCompletedIntegrationEvent, PaymentFailedIntegrationEvent


@pytest.fixture()
def payments(app_context):
    return app_context.payments


@pytest.fixture()
def published(record_events):
    """Integration events delivered on the bus during the test."""
    return record_events(PaymentCompletedIntegrationEvent, PaymentFailedIntegrationEvent)


def _create(payments, **overrides):
    values = {
        "order_id": "ord-001",
        "customer_id": "cust-001",
        "amount": 85.0,
        "currency": "USD",
        "method": "BankTransfer",
    }
    values.update(overrides)
    return payments.send(CreatePayment(**values))


def _card_fields(**overrides):
    fields = {
        "card_last4": "4242",
        "card_type": "Visa",
        "card_expiry_month": 12,
        "card_expiry_year": 2099,
        "card_holder_name": "Jane Doe",
    }
    fields.update(overrides)
    return fields


def _load(payment_id):
    return current_domain.repository_for(Payment).get(payment_id)


class TestCreatePayment:
    def test_create_bank_transfer(self, payments):
        payment_id = _create(payments)
        payment = _load(payment_id)

        assert payment.status == PaymentStatus.PENDING.value
        assert payment.method == "BankTransfer"
        assert payment.amount.amount == 85.0

    def test_create_card_payment(self, payments):
        payment_id = _create(payments, method="CreditCard", **_card_fields())
        payment = _load(payment_id)

        assert payment.card_details.last4 == "4242"
        assert payment.card_details.holder_name == "Jane Doe"

    def test_card_payment_without_card(self, payments):
        with pytest.raises(BusinessRuleViolationError) as exc:
            _create(payments, method="DebitCard")
        assert exc.value.code == "CARD_DETAILS_REQUIRED"

    def test_expired_card(self, payments):
        with pytest.raises(BusinessRuleViolationError) as exc:
            _create(payments, method="CreditCard", **_card_fields(card_expiry_month=1, card_expiry_year=2020))
        assert exc.value.code == "CARD_EXPIRED"

    def test_non_positive_amount(self, payments):
        with pytest.raises(BusinessRuleViolationError) as exc:
            _create(payments, amount=0.0)
        assert exc.value.code == "INVALID_PAYMENT_AMOUNT"
        assert current_domain.repository_for(Payment)._dao.query.all().total == 0


class TestLifecycle:
    def test_process_then_complete(self, payments, published):
        payment_id = _create(payments)
        payments.send(ProcessPayment(payment_id=payment_id))
        payments.send(CompletePayment(payment_id=payment_id, transaction_id="TXN-1"))

        payment = _load(payment_id)
        assert payment.status == PaymentStatus.COMPLETED.value
        assert payment.transaction_id == "TXN-1"

        assert len(published) == 1
        assert isinstance(published[0], PaymentCompletedIntegrationEvent)
        assert published[0].payment_id == payment_id
        assert published[0].amount == 85.0

    def test_complete_without_processing_is_rejected(self, payments, published):
        payment_id = _create(payments)
        with pytest.raises(BusinessRuleViolationError):
            payments.send(CompletePayment(payment_id=payment_id, transaction_id="TXN-1"))

        assert _load(payment_id).status == PaymentStatus.PENDING.value
        assert published == []

    def test_fail(self, payments, published):
        payment_id = _create(payments)
        payments.send(ProcessPayment(payment_id=payment_id))
        payments.send(FailPayment(payment_id=payment_id, reason="Insufficient funds"))

        assert _load(payment_id).failure_reason == "Insufficient funds"
        assert isinstance(published[0], PaymentFailedIntegrationEvent)
        assert published[0].reason == "Insufficient funds"

    def test_refund(self, payments):
        payment_id = _create(payments)
        payments.send(ProcessPayment(payment_id=payment_id))
        payments.send(CompletePayment(payment_id=payment_id, transaction_id="TXN-1"))
        payments.send(RefundPayment(payment_id=payment_id, reason="Customer request"))

        payment = _load(payment_id)
        assert payment.status == PaymentStatus.REFUNDED.value
        assert payment.refund_reason == "Customer request"

    def test_cancel(self, payments):
        payment_id = _create(payments)
        payments.send(CancelPayment(payment_id=payment_id, reason="Order cancelled"))
        assert _load(payment_id).status == PaymentStatus.CANCELLED.value


class TestCapture:
    def test_approved_capture(self, payments, published):
        payment_id = _create(payments, method="CreditCard", **_card_fields())
        status = payments.send(CapturePayment(payment_id=payment_id))

        payment = _load(payment_id)
        assert status == PaymentStatus.COMPLETED.value
        assert payment.transaction_id.startswith("TXN-")
        assert get_gateway().captures[0]["last4"] == "4242"
        assert isinstance(published[0], PaymentCompletedIntegrationEvent)

    def test_declined_capture(self, payments, published):
        get_gateway().configure(should_succeed=False, failure_reason="Do not honor")
        payment_id = _create(payments)
        status = payments.send(CapturePayment(payment_id=payment_id))

        payment = _load(payment_id)
        assert status == PaymentStatus.FAILED.value
        assert payment.failure_reason == "Do not honor"
        assert isinstance(published[0], PaymentFailedIntegrationEvent)

    def test_gateway_outage_leaves_payment_pending(self, payments, published):
        get_gateway().configure(available=False)
        payment_id = _create(payments)

        with pytest.raises(InfrastructureError):
            payments.send(CapturePayment(payment_id=payment_id))

        assert _load(payment_id).status == PaymentStatus.PENDING.value
        assert published == []

        get_gateway().configure(available=True)
        assert payments.send(CapturePayment(payment_id=payment_id)) == PaymentStatus.COMPLETED.value

    def test_create_with_capture_settles_in_one_command(self, payments, published):
        payment_id = _create(payments, capture=True)

        payment = _load(payment_id)
        assert payment.status == PaymentStatus.COMPLETED.value
        assert payment.transaction_id.startswith("TXN-")
        assert get_gateway().captures[0]["payment_id"] == payment_id
        assert isinstance(published[0], PaymentCompletedIntegrationEvent)

    def test_create_with_capture_during_outage_opens_nothing(self, payments, published):
        get_gateway().configure(available=False)

        with pytest.raises(InfrastructureError):
            _create(payments, capture=True)

        assert current_domain.repository_for(Payment)._dao.query.all().total == 0
        assert published == []
