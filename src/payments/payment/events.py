"""Domain events raised by the Payment aggregate.

PaymentCompleted and PaymentFailed drive the checkout saga back in the
Ordering context, via the integration events in ``shared.events.payments``.
"""

from protean.fields import DateTime, Float, Identifier, String

from payments.domain import payments


@payments.event(part_of="Payment")
class PaymentCreated:
    """A payment was opened for an order and awaits processing."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True, max_length=3)
    method = String(required=True, max_length=20)
    created_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentProcessingStarted:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    processed_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentCompleted:
    """Funds were captured by the gateway."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True, max_length=3)
    transaction_id = String(required=True, max_length=255)
    completed_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentFailed:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    failed_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentRefunded:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String(required=True, max_length=500)
    refunded_at = DateTime(required=True)


@payments.event(part_of="Payment")
class PaymentCancelled:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    cancelled_at = DateTime(required=True)
