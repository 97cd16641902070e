"""Local handlers for Order domain events.

The unit of work hands every event raised by an Order to these handlers,
synchronously and in the order the events were raised.
"""

import structlog
from protean.utils.mixins import handle
from shared.context import current_context
from shared.events.ordering import ORDER_SUBMITTED_V1, OrderSubmittedIntegrationEvent

from ordering.domain import ordering
from ordering.order.events import OrderCancelled, OrderCreated, OrderSubmitted
from ordering.order.order import Order
from ordering.order.translators import OrderSubmittedTranslator

logger = structlog.get_logger(__name__)

# Outbound contract, published to Payments
ordering.register_external_event(OrderSubmittedIntegrationEvent, ORDER_SUBMITTED_V1)


@ordering.event_handler(part_of=Order)
class OrderSubmittedPublisher:
    """Announces submitted orders to the rest of the system."""

    @handle(OrderSubmitted)
    def on_order_submitted(self, event: OrderSubmitted) -> None:
        integration_event = OrderSubmittedTranslator().to_integration_event(event)
        current_context().bus.publish(integration_event)
        logger.info(
            "Order submitted, awaiting payment",
            order_id=str(event.order_id),
            total_amount=event.total_amount,
            currency=event.currency,
            integration_event_id=integration_event.event_id,
        )


@ordering.event_handler(part_of=Order)
class OrderLifecycleLogger:
    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        logger.info("Order created", order_id=str(event.order_id), customer_id=str(event.customer_id))

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        logger.info(
            "Order cancelled",
            order_id=str(event.order_id),
            reason=event.reason,
            previous_status=event.previous_status,
        )
