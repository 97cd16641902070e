"""FastAPI routes for the Payments context."""

from fastapi import APIRouter, HTTPException
from shared.config import get_settings
from shared.context import context_for

from payments.api.schemas import (
    CompletePaymentRequest,
    ConfigureGatewayRequest,
    CreatePaymentRequest,
    FeeResponse,
    GatewayConfigResponse,
    PaymentIdResponse,
    PaymentListResponse,
    PaymentResponse,
    ReasonRequest,
    StatusResponse,
)
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.payment import queries
from payments.payment.cancellation import CancelPayment
from payments.payment.creation import CreatePayment
from payments.payment.fees import PaymentProcessingService
from payments.payment.processing import CapturePayment, CompletePayment, FailPayment, ProcessPayment
from payments.payment.refund import RefundPayment
from payments.payment.status import PaymentMethod

router = APIRouter(prefix="/payments", tags=["payments"])


def _send(command):
    return context_for("payments").send(command)


def _payment_list(payments) -> PaymentListResponse:
    return PaymentListResponse(payments=[PaymentResponse.from_payment(payment) for payment in payments])


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@router.post("", status_code=201, response_model=PaymentIdResponse)
async def create_payment(body: CreatePaymentRequest) -> PaymentIdResponse:
    card = body.card_details
    command = CreatePayment(
        order_id=body.order_id,
        customer_id=body.customer_id,
        amount=body.amount,
        currency=body.currency,
        method=body.method,
        card_last4=card.last4 if card else None,
        card_type=card.card_type if card else None,
        card_expiry_month=card.expiry_month if card else None,
        card_expiry_year=card.expiry_year if card else None,
        card_holder_name=card.holder_name if card else None,
    )
    return PaymentIdResponse(payment_id=_send(command))


@router.post("/{payment_id}/process", response_model=StatusResponse)
async def process_payment(payment_id: str) -> StatusResponse:
    _send(ProcessPayment(payment_id=payment_id))
    return StatusResponse(status="Processing")


@router.post("/{payment_id}/complete", response_model=StatusResponse)
async def complete_payment(payment_id: str, body: CompletePaymentRequest) -> StatusResponse:
    _send(CompletePayment(payment_id=payment_id, transaction_id=body.transaction_id))
    return StatusResponse(status="Completed")


@router.post("/{payment_id}/fail", response_model=StatusResponse)
async def fail_payment(payment_id: str, body: ReasonRequest) -> StatusResponse:
    _send(FailPayment(payment_id=payment_id, reason=body.reason))
    return StatusResponse(status="Failed")


@router.post("/{payment_id}/capture", response_model=StatusResponse)
async def capture_payment(payment_id: str) -> StatusResponse:
    """Process the payment and settle it with the gateway."""
    status = _send(CapturePayment(payment_id=payment_id))
    return StatusResponse(status=status)


@router.post("/{payment_id}/refund", response_model=StatusResponse)
async def refund_payment(payment_id: str, body: ReasonRequest) -> StatusResponse:
    _send(RefundPayment(payment_id=payment_id, reason=body.reason))
    return StatusResponse(status="Refunded")


@router.post("/{payment_id}/cancel", response_model=StatusResponse)
async def cancel_payment(payment_id: str, body: ReasonRequest) -> StatusResponse:
    _send(CancelPayment(payment_id=payment_id, reason=body.reason))
    return StatusResponse(status="Cancelled")


@router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if get_settings().is_production:
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
        available=body.available,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
        available=gateway.available,
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
@router.get("/pending", response_model=PaymentListResponse)
async def pending_payments() -> PaymentListResponse:
    return _payment_list(queries.get_pending_payments())


@router.get("/failed", response_model=PaymentListResponse)
async def failed_payments() -> PaymentListResponse:
    return _payment_list(queries.get_failed_payments())


@router.get("/refundable", response_model=PaymentListResponse)
async def refundable_payments() -> PaymentListResponse:
    return _payment_list(queries.get_refundable_payments())


@router.get("/high-value", response_model=PaymentListResponse)
async def high_value_payments(threshold: float | None = None) -> PaymentListResponse:
    return _payment_list(queries.get_high_value_payments(threshold))


@router.get("/by-order/{order_id}", response_model=PaymentResponse)
async def payment_for_order(order_id: str) -> PaymentResponse:
    return PaymentResponse.from_payment(queries.get_payment_by_order_id(order_id))


@router.get("/by-customer/{customer_id}", response_model=PaymentListResponse)
async def payments_by_customer(customer_id: str) -> PaymentListResponse:
    return _payment_list(queries.get_payments_by_customer(customer_id))


@router.get("/by-status/{status}", response_model=PaymentListResponse)
async def payments_by_status(status: str) -> PaymentListResponse:
    return _payment_list(queries.get_payments_by_status(status))


@router.get("/{payment_id}/fee", response_model=FeeResponse)
async def processing_fee(payment_id: str) -> FeeResponse:
    payment = queries.get_payment_by_id(payment_id)
    fee = PaymentProcessingService().calculate_processing_fee(payment.amount, PaymentMethod(payment.method))
    return FeeResponse(payment_id=payment_id, fee=fee.amount, currency=fee.currency)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str) -> PaymentResponse:
    return PaymentResponse.from_payment(queries.get_payment_by_id(payment_id))
