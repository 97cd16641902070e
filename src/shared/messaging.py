"""In-process transport for integration events between bounded contexts.

Integration events are protean events that no aggregate owns. Each one is
registered as an external event in the contexts that produce or consume it,
under a versioned type string, and reactions to it are ordinary
``@domain.event_handler`` classes. The bus is logically a message broker:
publishing only enqueues, and delivery to the handlers of every connected
domain happens once the publishing command has completed.
"""

import json
from collections import OrderedDict, deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

import structlog
from protean.core.event import BaseEvent
from protean.exceptions import ObjectNotFoundError, ValidationError

from shared.cancellation import CancellationToken
from shared.errors import InfrastructureError, TranslationError

logger = structlog.get_logger(__name__)


def read_event(event_cls: type[BaseEvent], value) -> BaseEvent:
    """Accept an instance, a dict or a JSON document; reject anything else."""
    name = event_cls.__name__
    if value is None:
        raise TranslationError(f"{name} is required")
    if isinstance(value, event_cls):
        return value
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise TranslationError(f"{name} is not valid JSON: {exc.msg}") from exc
    if not isinstance(value, dict):
        raise TranslationError(f"Cannot read {name} from {type(value).__name__}")

    data = {key: item for key, item in value.items() if key != "_metadata"}
    try:
        return event_cls(**data)
    except ValidationError as exc:
        field, messages = next(iter(exc.messages.items()))
        raise TranslationError(f"Malformed {name}: {messages[0]}", field=field) from exc


def type_of(event: BaseEvent) -> str:
    return event.__class__.__type__


class Inbox:
    """Ids of integration events a context has already handled.

    Holds at most ``capacity`` ids; the oldest are forgotten first, so a
    redelivery older than that window is only caught by the aggregate's own
    transition rules.
    """

    def __init__(self, capacity: int = 10_000):
        self.capacity = capacity
        self._seen: OrderedDict[str, None] = OrderedDict()

    def __contains__(self, event_id: str) -> bool:
        return event_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def record(self, event_id: str) -> None:
        self._seen[event_id] = None
        self._seen.move_to_end(event_id)
        while len(self._seen) > self.capacity:
            self._seen.popitem(last=False)

    def clear(self) -> None:
        self._seen.clear()


@dataclass(frozen=True)
class DeadLetter:
    event: BaseEvent
    handler: str
    error: Exception


@dataclass
class _Envelope:
    event: BaseEvent
    delivered_to: set


class InMemoryEventBus:
    """At-least-once, FIFO delivery of integration events to connected domains.

    A handler that already handled an event is not invoked again for it,
    even if delivery of the event is retried because another handler failed
    with an infrastructure error. Rejected events are kept in a bounded
    dead-letter queue.
    """

    def __init__(self, dead_letter_capacity: int = 1_000):
        self._event_types: dict[str, type[BaseEvent]] = {}
        self._domains: list = []
        self._pending: deque[_Envelope] = deque()
        self._staging: list[list[BaseEvent]] = []
        self._delivering = False
        self.dead_letters: deque[DeadLetter] = deque(maxlen=dead_letter_capacity)

    # -------------------------------------------------------------------
    # Startup registration
    # -------------------------------------------------------------------
    def register_event_type(self, event_cls: type[BaseEvent]) -> None:
        self._event_types[event_cls.__type__] = event_cls

    def connect(self, domain) -> None:
        """Deliver published events to ``domain``'s event handlers."""
        if all(connected is not domain for connected in self._domains):
            self._domains.append(domain)

    def handlers_for(self, event: BaseEvent) -> list[tuple[Any, type]]:
        """Handler classes listening to ``event``, grouped by domain and sorted by name."""
        return [
            (domain, handler_cls)
            for domain in self._domains
            for handler_cls in sorted(domain.handlers_for(event), key=lambda cls: cls.__name__)
        ]

    # -------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------
    def publish(self, event: BaseEvent) -> None:
        if self._staging:
            self._staging[-1].append(event)
        else:
            self._enqueue(event)

    def receive(self, event_type: str, payload: str | bytes | dict) -> BaseEvent:
        """Accept an event in wire format and queue it for delivery."""
        event_cls = self._event_types.get(event_type)
        if event_cls is None:
            raise TranslationError(f"Unknown integration event type {event_type!r}", field="event_type")
        event = read_event(event_cls, payload)
        self.publish(event)
        return event

    @contextmanager
    def outbox(self):
        """Hold events published inside the block until it completes cleanly."""
        staged: list[BaseEvent] = []
        self._staging.append(staged)
        try:
            yield staged
        except BaseException:
            self._staging.pop()
            if staged:
                logger.info("Discarding staged integration events", count=len(staged))
            raise
        self._staging.pop()
        for event in staged:
            self.publish(event)

    def _enqueue(self, event: BaseEvent) -> None:
        self._pending.append(_Envelope(event=event, delivered_to=set()))
        logger.debug("Integration event queued", event_type=type_of(event), event_id=event.event_id)

    @property
    def pending(self) -> list[BaseEvent]:
        return [envelope.event for envelope in self._pending]

    # -------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------
    def deliver_pending(self, token: CancellationToken | None = None) -> int:
        """Deliver queued events until the queue is empty.

        Returns the number of events fully delivered. Calls made while a
        delivery is already running return 0 and leave the work to the
        outer loop.
        """
        if self._delivering:
            return 0

        delivered = 0
        self._delivering = True
        try:
            while self._pending:
                if token is not None:
                    token.raise_if_cancelled()
                envelope = self._pending[0]
                self._deliver(envelope)
                self._pending.popleft()
                delivered += 1
        finally:
            self._delivering = False
        return delivered

    def _deliver(self, envelope: _Envelope) -> None:
        event = envelope.event
        for domain, handler_cls in self.handlers_for(event):
            key = (domain.name, handler_cls.__name__)
            if key in envelope.delivered_to:
                continue
            name = f"{domain.name}.{handler_cls.__name__}"
            try:
                with domain.domain_context():
                    handler_cls._handle(event)
            except InfrastructureError:
                logger.warning(
                    "Integration event delivery failed, will retry",
                    event_type=type_of(event),
                    event_id=event.event_id,
                    handler=name,
                )
                raise
            except (ValidationError, ObjectNotFoundError, TranslationError) as exc:
                logger.error(
                    "Integration event rejected",
                    event_type=type_of(event),
                    event_id=event.event_id,
                    handler=name,
                    error=str(exc),
                )
                self.dead_letters.append(DeadLetter(event=event, handler=name, error=exc))
            envelope.delivered_to.add(key)

    def reset(self) -> None:
        self._pending.clear()
        self._staging.clear()
        self.dead_letters.clear()
        self._delivering = False
