"""Domain events raised by the Order aggregate.

Events are immutable facts, versioned so that handlers can evolve. They stay
inside the Ordering context: other contexts only ever see the integration
events in ``shared.events.ordering``.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderCreated:
    """A new draft order was opened for a customer."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    currency = String(required=True, max_length=3)
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderItemAdded:
    """A product line was added, or its quantity increased."""

    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    unit_price = Float(required=True)
    quantity = Integer(required=True)
    currency = String(required=True, max_length=3)


@ordering.event(part_of="Order")
class OrderSubmitted:
    """The order was frozen and now awaits payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    currency = String(required=True, max_length=3)
    submitted_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id = Identifier(required=True)
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaymentFailed:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)
    failed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    shipped_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before fulfilment started."""

    __version__ = 1

    order_id = Identifier(required=True)
    reason = String(max_length=500)
    previous_status = String(required=True, max_length=50)
    cancelled_at = DateTime(required=True)
