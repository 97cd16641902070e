"""Process wiring for the Ordering and Payments contexts.

Everything that used to be implicit, global setup happens here, once, at
process start: domains are initialized, both contexts share one integration bus, and the
bus is connected to both domains so their event handlers receive what the
other side publishes. Tests call ``configure()`` before every test to get
a fresh, isolated set of collaborators.

Usage:
    from bootstrap import configure, init_domains

    init_domains()
    app_context = configure()
"""

from dataclasses import dataclass

import structlog
from ordering.domain import ordering
from payments.domain import payments
from shared.config import Settings, get_settings
from shared.context import BoundedContext, register_context, unregister_all
from shared.events.ordering import OrderSubmittedIntegrationEvent
from shared.events.payments import PaymentCompletedIntegrationEvent, PaymentFailedIntegrationEvent
from shared.messaging import InMemoryEventBus
from shared.serialization import Codec, CodecRegistry

logger = structlog.get_logger(__name__)

_initialized: set[str] = set()


@dataclass
class AppContext:
    settings: Settings
    bus: InMemoryEventBus
    ordering: BoundedContext
    payments: BoundedContext
    codecs: CodecRegistry


def init_domains() -> None:
    """Initialize both protean domains, once per process."""
    for domain in (ordering, payments):
        if domain.name not in _initialized:
            domain.init()
            _initialized.add(domain.name)


def build_codec_registry() -> CodecRegistry:
    from ordering.order.order import Order
    from payments.payment.payment import Payment

    registry = CodecRegistry()
    registry.register(Codec(Order))
    registry.register(Codec(Payment))
    return registry


def configure(settings: Settings | None = None, bus: InMemoryEventBus | None = None) -> AppContext:
    """Build and register both bounded contexts, replacing any earlier wiring."""
    settings = settings or get_settings()
    bus = bus or InMemoryEventBus(settings.dead_letter_capacity)

    for event_cls in (
        OrderSubmittedIntegrationEvent,
        PaymentCompletedIntegrationEvent,
        PaymentFailedIntegrationEvent,
    ):
        bus.register_event_type(event_cls)

    bus.connect(ordering)
    bus.connect(payments)

    ordering_context = BoundedContext(ordering, bus, settings)
    payments_context = BoundedContext(payments, bus, settings)

    unregister_all()
    register_context(ordering_context)
    register_context(payments_context)

    logger.info(
        "Bounded contexts configured",
        environment=settings.environment,
        dispatch_before_commit=settings.dispatch_before_commit,
        default_payment_method=settings.default_payment_method,
    )
    return AppContext(
        settings=settings,
        bus=bus,
        ordering=ordering_context,
        payments=payments_context,
        codecs=build_codec_registry(),
    )
