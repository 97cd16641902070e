"""Bounded context gateway.

A ``BoundedContext`` bundles a protean domain with the shared integration
bus, settings and the inbox of integration events it already handled.
``send()`` is the single entry point for executing a command: it runs the
command handler inside the domain context, releases the integration events
the command produced only if it succeeded, and then delivers them to the
other contexts. A delivery that fails for infrastructure reasons does not
undo the command; the events stay queued for the next delivery.
"""

import structlog
from protean.utils.globals import current_domain

from shared.cancellation import CancellationToken, cancellation_scope
from shared.config import Settings
from shared.errors import InfrastructureError
from shared.messaging import InMemoryEventBus, Inbox
from shared.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)

_contexts: dict[str, "BoundedContext"] = {}


class BoundedContext:
    def __init__(self, domain, bus: InMemoryEventBus, settings: Settings):
        self.domain = domain
        self.bus = bus
        self.settings = settings
        self.inbox = Inbox(settings.inbox_capacity)

    @property
    def name(self) -> str:
        return self.domain.name

    def unit_of_work(self, token: CancellationToken | None = None) -> UnitOfWork:
        return UnitOfWork(
            self.domain,
            dispatch_before_commit=self.settings.dispatch_before_commit,
            token=token,
        )

    def send(self, command, timeout: float | None = None, token: CancellationToken | None = None):
        """Process ``command`` synchronously and return the handler's result."""
        if token is None:
            token = CancellationToken(timeout if timeout is not None else self.settings.command_timeout_seconds)

        logger.debug("Processing command", context=self.name, command=type(command).__name__)
        with cancellation_scope(token):
            with self.domain.domain_context():
                with self.bus.outbox():
                    result = self.domain.process(command, asynchronous=False)
            try:
                self.bus.deliver_pending(token)
            except InfrastructureError as exc:
                logger.warning(
                    "Integration event delivery deferred",
                    context=self.name,
                    command=type(command).__name__,
                    pending=len(self.bus.pending),
                    error=str(exc),
                )
        return result


def register_context(context: BoundedContext) -> None:
    _contexts[context.name] = context


def context_for(name: str) -> BoundedContext:
    try:
        return _contexts[name]
    except KeyError:
        raise LookupError(f"Bounded context {name!r} is not registered; call bootstrap.configure() first") from None


def registered_contexts() -> list[BoundedContext]:
    return list(_contexts.values())


def unregister_all() -> None:
    _contexts.clear()


def current_context() -> BoundedContext:
    return context_for(current_domain.name)


def unit_of_work() -> UnitOfWork:
    """Unit of work for the context whose domain is currently active."""
    return current_context().unit_of_work()
