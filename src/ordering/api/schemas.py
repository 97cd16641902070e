"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from the internal protean
commands they are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str | None = None
    country: str
    zip_code: str


class OrderItemSchema(BaseModel):
    product_id: str
    product_name: str
    unit_price: float = Field(gt=0)
    quantity: int = Field(gt=0)
    discount: float = Field(default=0.0, ge=0)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    customer_id: str
    shipping_address: AddressSchema
    currency: str = Field(default="USD", min_length=3, max_length=3)
    items: list[OrderItemSchema] = Field(default_factory=list)
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "shipping_address": {
                        "street": "1 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "country": "US",
                        "zip_code": "62701",
                    },
                    "currency": "USD",
                    "items": [
                        {"product_id": "prod-001", "product_name": "Widget", "unit_price": 25.0, "quantity": 1}
                    ],
                }
            ]
        }
    }


class AddItemRequest(BaseModel):
    product_id: str
    product_name: str
    unit_price: float = Field(gt=0)
    quantity: int = Field(gt=0)
    discount: float = Field(default=0.0, ge=0)


class UpdateItemQuantityRequest(BaseModel):
    quantity: int


class UpdateShippingAddressRequest(AddressSchema):
    pass


class SetNotesRequest(BaseModel):
    notes: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str = ""


class RecordPaymentSuccessRequest(BaseModel):
    paid_at: datetime | None = None


class RecordPaymentFailureRequest(BaseModel):
    reason: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class ItemIdResponse(BaseModel):
    item_id: str


class SubmitOrderResponse(BaseModel):
    status: str = "Submitted"
    total_amount: float


class StatusResponse(BaseModel):
    status: str = "ok"


class OrderItemResponse(BaseModel):
    item_id: str
    product_id: str
    product_name: str
    unit_price: float
    quantity: int
    discount: float
    total: float


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    status: str
    currency: str
    total_amount: float
    shipping_address: AddressSchema
    items: list[OrderItemResponse]
    notes: str | None = None
    cancellation_reason: str | None = None
    payment_failure_reason: str | None = None
    version: int
    created_at: datetime | None = None
    submitted_at: datetime | None = None
    paid_at: datetime | None = None
    cancelled_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        address = order.shipping_address
        return cls(
            order_id=str(order.id),
            customer_id=str(order.customer_id),
            status=order.status,
            currency=order.currency,
            total_amount=order.total_amount,
            shipping_address=AddressSchema(
                street=address.street,
                city=address.city,
                state=address.state,
                country=address.country,
                zip_code=address.zip_code,
            ),
            items=[
                OrderItemResponse(
                    item_id=str(item.id),
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    unit_price=item.unit_price.amount,
                    quantity=item.quantity,
                    discount=item.discount.amount if item.discount else 0.0,
                    total=item.total().amount,
                )
                for item in order.items
            ],
            notes=order.notes,
            cancellation_reason=order.cancellation_reason,
            payment_failure_reason=order.payment_failure_reason,
            version=order.version,
            created_at=order.created_at,
            submitted_at=order.submitted_at,
            paid_at=order.paid_at,
            cancelled_at=order.cancelled_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
