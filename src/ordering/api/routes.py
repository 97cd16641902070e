"""FastAPI routes for the Ordering context.

Commands go through the Ordering bounded context so that the integration
events they raise reach Payments once the command has completed.
"""

import json
from datetime import UTC, datetime

from fastapi import APIRouter, Body
from shared.context import context_for

from ordering.api.schemas import (
    AddItemRequest,
    CancelOrderRequest,
    CreateOrderRequest,
    ItemIdResponse,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    RecordPaymentFailureRequest,
    RecordPaymentSuccessRequest,
    SetNotesRequest,
    StatusResponse,
    SubmitOrderResponse,
    UpdateItemQuantityRequest,
    UpdateShippingAddressRequest,
)
from ordering.order import queries
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import CreateOrder, PlaceExternalOrder
from ordering.order.fulfillment import DeliverOrder, ShipOrder, StartOrderProcessing
from ordering.order.modification import (
    AddOrderItem,
    RemoveOrderItem,
    SetOrderNotes,
    UpdateOrderItemQuantity,
    UpdateShippingAddress,
)
from ordering.order.payment import MarkOrderAsPaid, MarkOrderPaymentFailed
from ordering.order.submission import SubmitOrder

router = APIRouter(prefix="/orders", tags=["orders"])


def _send(command):
    return context_for("ordering").send(command)


def _order_list(orders) -> OrderListResponse:
    return OrderListResponse(orders=[OrderResponse.from_order(order) for order in orders])


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------
@router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest) -> OrderIdResponse:
    """Create a Draft order, optionally with its first items."""
    address = body.shipping_address
    command = CreateOrder(
        customer_id=body.customer_id,
        street=address.street,
        city=address.city,
        state=address.state,
        country=address.country,
        zip_code=address.zip_code,
        currency=body.currency,
        notes=body.notes,
        items=json.dumps([item.model_dump() for item in body.items]) if body.items else None,
    )
    return OrderIdResponse(order_id=_send(command))


@router.post("/external", status_code=201, response_model=OrderIdResponse)
async def place_external_order(payload: dict = Body(...)) -> OrderIdResponse:
    """Accept an order document from an external sales channel."""
    order_id = _send(PlaceExternalOrder(external_payload=json.dumps(payload, default=str)))
    return OrderIdResponse(order_id=order_id)


# ---------------------------------------------------------------------------
# Items and details
# ---------------------------------------------------------------------------
@router.post("/{order_id}/items", status_code=201, response_model=ItemIdResponse)
async def add_item(order_id: str, body: AddItemRequest) -> ItemIdResponse:
    command = AddOrderItem(
        order_id=order_id,
        product_id=body.product_id,
        product_name=body.product_name,
        unit_price=body.unit_price,
        quantity=body.quantity,
        discount=body.discount,
    )
    return ItemIdResponse(item_id=_send(command))


@router.delete("/{order_id}/items/{item_id}", response_model=StatusResponse)
async def remove_item(order_id: str, item_id: str) -> StatusResponse:
    _send(RemoveOrderItem(order_id=order_id, item_id=item_id))
    return StatusResponse()


@router.put("/{order_id}/items/{item_id}", response_model=StatusResponse)
async def update_item_quantity(order_id: str, item_id: str, body: UpdateItemQuantityRequest) -> StatusResponse:
    """Change an item's quantity; zero or less removes the item."""
    _send(UpdateOrderItemQuantity(order_id=order_id, item_id=item_id, quantity=body.quantity))
    return StatusResponse()


@router.put("/{order_id}/shipping-address", response_model=StatusResponse)
async def update_shipping_address(order_id: str, body: UpdateShippingAddressRequest) -> StatusResponse:
    _send(UpdateShippingAddress(order_id=order_id, **body.model_dump()))
    return StatusResponse()


@router.put("/{order_id}/notes", response_model=StatusResponse)
async def set_notes(order_id: str, body: SetNotesRequest) -> StatusResponse:
    _send(SetOrderNotes(order_id=order_id, notes=body.notes))
    return StatusResponse()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------
@router.post("/{order_id}/submit", response_model=SubmitOrderResponse)
async def submit_order(order_id: str) -> SubmitOrderResponse:
    """Submit a Draft order; Payments opens a payment for it."""
    total_amount = _send(SubmitOrder(order_id=order_id))
    return SubmitOrderResponse(total_amount=total_amount)


@router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    _send(CancelOrder(order_id=order_id, reason=body.reason))
    return StatusResponse(status="Cancelled")


@router.post("/{order_id}/payment/success", response_model=StatusResponse)
async def record_payment_success(order_id: str, body: RecordPaymentSuccessRequest) -> StatusResponse:
    _send(MarkOrderAsPaid(order_id=order_id, paid_at=body.paid_at or datetime.now(UTC)))
    return StatusResponse(status="Paid")


@router.post("/{order_id}/payment/failure", response_model=StatusResponse)
async def record_payment_failure(order_id: str, body: RecordPaymentFailureRequest) -> StatusResponse:
    _send(MarkOrderPaymentFailed(order_id=order_id, reason=body.reason))
    return StatusResponse(status="PaymentFailed")


@router.post("/{order_id}/process", response_model=StatusResponse)
async def start_processing(order_id: str) -> StatusResponse:
    _send(StartOrderProcessing(order_id=order_id))
    return StatusResponse(status="Processing")


@router.post("/{order_id}/ship", response_model=StatusResponse)
async def ship_order(order_id: str) -> StatusResponse:
    _send(ShipOrder(order_id=order_id))
    return StatusResponse(status="Shipped")


@router.post("/{order_id}/deliver", response_model=StatusResponse)
async def deliver_order(order_id: str) -> StatusResponse:
    _send(DeliverOrder(order_id=order_id))
    return StatusResponse(status="Delivered")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
@router.get("/pending", response_model=OrderListResponse)
async def pending_orders() -> OrderListResponse:
    return _order_list(queries.get_pending_orders())


@router.get("/overdue", response_model=OrderListResponse)
async def overdue_orders(hours: int | None = None) -> OrderListResponse:
    return _order_list(queries.get_overdue_orders(hours))


@router.get("/cancellable", response_model=OrderListResponse)
async def cancellable_orders() -> OrderListResponse:
    return _order_list(queries.get_cancellable_orders())


@router.get("/ready-for-processing", response_model=OrderListResponse)
async def orders_ready_for_processing() -> OrderListResponse:
    return _order_list(queries.get_orders_ready_for_processing())


@router.get("/by-customer/{customer_id}", response_model=OrderListResponse)
async def orders_by_customer(customer_id: str) -> OrderListResponse:
    return _order_list(queries.get_orders_by_customer(customer_id))


@router.get("/by-status/{status}", response_model=OrderListResponse)
async def orders_by_status(status: str) -> OrderListResponse:
    return _order_list(queries.get_orders_by_status(status))


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse.from_order(queries.get_order_by_id(order_id))
