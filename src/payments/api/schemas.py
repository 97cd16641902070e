"""Pydantic request/response schemas for the Payments API.

These are external contracts, kept separate from the internal protean
commands they are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CardDetailsSchema(BaseModel):
    last4: str = Field(min_length=4, max_length=4)
    card_type: str | None = None
    expiry_month: int = Field(ge=1, le=12)
    expiry_year: int
    holder_name: str


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CreatePaymentRequest(BaseModel):
    order_id: str
    customer_id: str
    amount: float
    currency: str = Field(default="USD", min_length=3, max_length=3)
    method: str
    card_details: CardDetailsSchema | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order_id": "ord-001",
                    "customer_id": "cust-001",
                    "amount": 85.0,
                    "currency": "USD",
                    "method": "CreditCard",
                    "card_details": {
                        "last4": "4242",
                        "card_type": "Visa",
                        "expiry_month": 12,
                        "expiry_year": 2030,
                        "holder_name": "Jane Doe",
                    },
                }
            ]
        }
    }


class CompletePaymentRequest(BaseModel):
    transaction_id: str = Field(min_length=1)


class ReasonRequest(BaseModel):
    reason: str = Field(min_length=1)


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Card declined"
    available: bool = True


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class PaymentIdResponse(BaseModel):
    payment_id: str


class StatusResponse(BaseModel):
    status: str


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
    available: bool


class FeeResponse(BaseModel):
    payment_id: str
    fee: float
    currency: str


class PaymentResponse(BaseModel):
    payment_id: str
    order_id: str
    customer_id: str
    amount: float
    currency: str
    status: str
    method: str
    card: str | None = None
    transaction_id: str | None = None
    failure_reason: str | None = None
    refund_reason: str | None = None
    version: int
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def from_payment(cls, payment) -> "PaymentResponse":
        return cls(
            payment_id=str(payment.id),
            order_id=str(payment.order_id),
            customer_id=str(payment.customer_id),
            amount=payment.amount.amount,
            currency=payment.amount.currency,
            status=payment.status,
            method=payment.method,
            card=payment.card_details.masked() if payment.card_details else None,
            transaction_id=payment.transaction_id,
            failure_reason=payment.failure_reason,
            refund_reason=payment.refund_reason,
            version=payment.version,
            created_at=payment.created_at,
            completed_at=payment.completed_at,
        )


class PaymentListResponse(BaseModel):
    payments: list[PaymentResponse]
