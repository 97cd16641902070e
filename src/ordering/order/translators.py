"""Anti-corruption translators for the Ordering context.

Translators only rename fields and convert types. They never apply business
rules, and they reject missing or malformed input with ``TranslationError``
before it can reach an aggregate.
"""

import json

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from shared.errors import TranslationError
from shared.events.ordering import OrderSubmittedIntegrationEvent
from shared.events.payments import PaymentCompletedIntegrationEvent, PaymentFailedIntegrationEvent
from shared.messaging import read_event

from ordering.order.events import OrderSubmitted
from ordering.order.factory import CreateOrderData, OrderItemData
from ordering.order.identifiers import CustomerId, OrderId, ProductId
from ordering.order.order import Address, Money
from ordering.order.payment import MarkOrderAsPaid, MarkOrderPaymentFailed

MAX_EXTERNAL_ITEMS = 100


# ---------------------------------------------------------------------------
# Outbound: domain event -> integration event
# ---------------------------------------------------------------------------
class OrderSubmittedTranslator:
    def to_integration_event(self, event: OrderSubmitted) -> OrderSubmittedIntegrationEvent:
        if not isinstance(event, OrderSubmitted):
            raise TranslationError(f"Expected OrderSubmitted, got {type(event).__name__}")
        return read_event(
            OrderSubmittedIntegrationEvent,
            {
                "order_id": OrderId.from_raw(str(event.order_id)).raw(),
                "customer_id": CustomerId.from_raw(str(event.customer_id)).raw(),
                "total_amount": event.total_amount,
                "currency": event.currency,
            },
        )


# ---------------------------------------------------------------------------
# Inbound: Payments integration events -> Ordering commands
# ---------------------------------------------------------------------------
class PaymentCompletedTranslator:
    def to_command(self, event) -> MarkOrderAsPaid:
        event = read_event(PaymentCompletedIntegrationEvent, event)
        return MarkOrderAsPaid(
            order_id=OrderId.from_raw(str(event.order_id)).raw(),
            paid_at=event.paid_at,
        )


class PaymentFailedTranslator:
    def to_command(self, event) -> MarkOrderPaymentFailed:
        event = read_event(PaymentFailedIntegrationEvent, event)
        return MarkOrderPaymentFailed(
            order_id=OrderId.from_raw(str(event.order_id)).raw(),
            reason=event.reason,
        )


# ---------------------------------------------------------------------------
# External sales channels -> CreateOrderData
# ---------------------------------------------------------------------------
class ExternalOrderItem(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    product_id: str = Field(min_length=1)
    product_name: str = Field(min_length=1)
    unit_price: float = Field(gt=0)
    quantity: int = Field(gt=0)


class ExternalOrder(BaseModel):
    """Order document as sent by a marketplace or partner storefront."""

    model_config = ConfigDict(str_strip_whitespace=True)

    external_order_id: str | None = None
    customer_id: str = Field(min_length=1)
    customer_name: str | None = None
    shipping_street: str = Field(min_length=1)
    shipping_city: str = Field(min_length=1)
    shipping_state: str | None = None
    shipping_country: str = Field(min_length=1)
    shipping_zip_code: str = Field(min_length=1)
    currency: str = Field(min_length=3, max_length=3)
    items: list[ExternalOrderItem] = Field(min_length=1, max_length=MAX_EXTERNAL_ITEMS)
    notes: str | None = None


class ExternalOrderTranslator:
    def translate(self, payload) -> CreateOrderData:
        external = self._parse(payload)
        currency = external.currency.upper()
        return CreateOrderData(
            customer_id=CustomerId.from_raw(external.customer_id),
            shipping_address=Address(
                street=external.shipping_street,
                city=external.shipping_city,
                state=external.shipping_state,
                country=external.shipping_country,
                zip_code=external.shipping_zip_code,
            ),
            currency=currency,
            items=tuple(
                OrderItemData(
                    product_id=ProductId.from_raw(item.product_id),
                    product_name=item.product_name,
                    unit_price=Money.of(item.unit_price, currency),
                    quantity=item.quantity,
                )
                for item in external.items
            ),
            notes=external.notes,
        )

    def _parse(self, payload) -> ExternalOrder:
        if payload is None:
            raise TranslationError("External order payload is required")
        try:
            if isinstance(payload, (str, bytes)):
                payload = json.loads(payload)
            if not isinstance(payload, dict):
                raise TranslationError(f"External order must be an object, got {type(payload).__name__}")
            return ExternalOrder.model_validate(payload)
        except json.JSONDecodeError as exc:
            raise TranslationError(f"External order is not valid JSON: {exc.msg}") from exc
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            field = ".".join(str(part) for part in error["loc"])
            raise TranslationError(error["msg"], field=field) from exc
