"""Opening a payment for an order: command and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from shared.context import current_context
from shared.rules import check_rule

from payments.domain import payments
from payments.payment.identifiers import CustomerReference, OrderReference
from payments.payment.payment import CardDetails, Money, Payment
from payments.payment.processing import settle_with_gateway
from payments.payment.rules import PaymentAmountMustBePositiveRule
from payments.payment.status import PaymentMethod


@payments.command(part_of="Payment")
class CreatePayment:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(max_length=3, default="USD")
    method = String(required=True, max_length=20, choices=PaymentMethod)
    card_last4 = String(max_length=4)
    card_type = String(max_length=30)
    card_expiry_month = Integer()
    card_expiry_year = Integer()
    card_holder_name = String(max_length=200)
    # Settle with the gateway in the same transaction that opens the payment
    capture = Boolean(default=False)


def card_details_from(command) -> CardDetails | None:
    if not command.card_last4:
        return None
    return CardDetails.build(
        last4=command.card_last4,
        card_type=command.card_type or command.method,
        expiry_month=command.card_expiry_month,
        expiry_year=command.card_expiry_year,
        holder_name=command.card_holder_name,
    )


@payments.command_handler(part_of=Payment)
class CreatePaymentHandler:
    @handle(CreatePayment)
    def create_payment(self, command):
        check_rule(PaymentAmountMustBePositiveRule(command.amount))

        payment = Payment.create_for_order(
            OrderReference.from_raw(command.order_id),
            CustomerReference.from_raw(command.customer_id),
            Money.of(command.amount, command.currency or "USD"),
            PaymentMethod(command.method),
            card_details_from(command),
        )
        if command.capture:
            settle_with_gateway(payment)
        with current_context().unit_of_work() as uow:
            uow.register(payment)
            uow.save_entities()
        return str(payment.id)
