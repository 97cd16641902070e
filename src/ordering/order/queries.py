"""Read-side queries over orders, backed by specification pushdown."""

from protean.utils.globals import current_domain
from shared.config import get_settings
from shared.errors import TranslationError

from ordering.order.order import Order
from ordering.order.specifications import OrderReadyForProcessingSpecification
from ordering.order.status import OrderStatus


def _orders():
    return current_domain.repository_for(Order)


def get_order_by_id(order_id: str) -> Order:
    """Raises ``ObjectNotFoundError`` for unknown ids."""
    return _orders().get(order_id)


def get_orders_by_customer(customer_id: str) -> list[Order]:
    return _orders().by_customer(customer_id)


def get_orders_by_status(status: OrderStatus | str) -> list[Order]:
    try:
        status = OrderStatus(status)
    except ValueError as exc:
        raise TranslationError(f"Unknown order status {status!r}", field="status") from exc
    return _orders().by_status(status)


def get_pending_orders() -> list[Order]:
    return _orders().pending()


def get_overdue_orders(hours: int | None = None) -> list[Order]:
    return _orders().overdue(hours if hours is not None else get_settings().overdue_order_hours)


def get_cancellable_orders() -> list[Order]:
    return _orders().cancellable()


def get_orders_ready_for_processing() -> list[Order]:
    return _orders().find(OrderReadyForProcessingSpecification())
