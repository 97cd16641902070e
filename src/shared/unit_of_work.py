"""Unit of work coordinating aggregate persistence with domain event dispatch.

``save_entities()`` runs four steps for every aggregate tracked in the
current transaction:

1. collect the pending domain events,
2. take them off the aggregates,
3. dispatch each event to the domain's event handlers, in the order raised,
4. write the aggregates, after checking their optimistic version.

With ``dispatch_before_commit`` on (the default), a failing handler aborts
the transaction before anything is written, at the cost of handlers
observing state that is not durable yet. Turning it off writes first and
dispatches afterwards: handlers only see durable state, but a handler
failure can no longer undo the write. Integration events published by
handlers are staged by the bus and only leave the context once the whole
command succeeded, so other contexts never observe uncommitted data in
either mode.
"""

from dataclasses import dataclass
from typing import Any

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from shared.cancellation import CancellationToken, current_token
from shared.errors import ConcurrencyConflictError, InfrastructureError

logger = structlog.get_logger(__name__)

_NEW = object()


@dataclass
class _Tracked:
    aggregate: Any
    expected_version: Any
    removed: bool = False

    @property
    def is_new(self) -> bool:
        return self.expected_version is _NEW


class UnitOfWork:
    def __init__(
        self,
        domain,
        *,
        dispatch_before_commit: bool = True,
        token: CancellationToken | None = None,
    ):
        self.domain = domain
        self.dispatch_before_commit = dispatch_before_commit
        self._token = token
        self._tracked: dict[tuple[str, str], _Tracked] = {}

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.discard()
        return False

    @property
    def token(self) -> CancellationToken | None:
        return self._token or current_token()

    def _check_cancelled(self) -> None:
        if self.token is not None:
            self.token.raise_if_cancelled()

    # -------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------
    def load(self, aggregate_cls, identifier: str):
        """Load an aggregate and remember the version it was read at."""
        self._check_cancelled()
        aggregate = self.domain.repository_for(aggregate_cls).get(identifier)
        self._track(aggregate, aggregate.version)
        return aggregate

    def register(self, aggregate, expected_version: int | None = None):
        """Track an aggregate created or loaded outside this unit of work.

        Without ``expected_version`` the aggregate is treated as new and
        must not exist in the store yet.
        """
        self._track(aggregate, _NEW if expected_version is None else expected_version)
        return aggregate

    def remove(self, aggregate) -> None:
        key = self._key(aggregate)
        if key not in self._tracked:
            self._track(aggregate, aggregate.version)
        self._tracked[key].removed = True

    def discard(self) -> None:
        self._tracked.clear()

    @property
    def tracked(self) -> list:
        return [entry.aggregate for entry in self._tracked.values()]

    def _key(self, aggregate) -> tuple[str, str]:
        return (type(aggregate).__name__, str(aggregate.id))

    def _track(self, aggregate, expected_version) -> None:
        self._tracked.setdefault(self._key(aggregate), _Tracked(aggregate, expected_version))

    # -------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------
    def save_entities(self) -> list:
        """Dispatch pending domain events and persist tracked aggregates.

        Returns the dispatched events in the order they were raised.
        """
        self._check_cancelled()

        collected = [(entry.aggregate, list(entry.aggregate._events)) for entry in self._tracked.values()]
        for aggregate, _ in collected:
            aggregate._events.clear()

        events = [event for _, pending in collected for event in pending]
        try:
            if self.dispatch_before_commit:
                self._dispatch(events)
                self._commit()
            else:
                self._commit()
                self._dispatch(events)
        except Exception:
            # Events stay with their aggregates until they were handled
            for aggregate, pending in collected:
                aggregate._events[:0] = pending
            raise

        self._tracked.clear()
        return events

    def _dispatch(self, events: list) -> None:
        for event in events:
            self._check_cancelled()
            for handler_cls in sorted(self.domain.handlers_for(event), key=lambda cls: cls.__name__):
                logger.debug(
                    "Dispatching domain event",
                    context=self.domain.name,
                    event_type=event.__class__.__type__,
                    handler=handler_cls.__name__,
                )
                handler_cls._handle(event)

    def _commit(self) -> None:
        for entry in self._tracked.values():
            self._check_cancelled()
            self._check_version(entry)

        for entry in self._tracked.values():
            repository = self.domain.repository_for(type(entry.aggregate))
            try:
                if entry.removed:
                    repository.remove(entry.aggregate)
                else:
                    repository.add(entry.aggregate)
            except (ValidationError, ObjectNotFoundError, ConcurrencyConflictError):
                raise
            except Exception as exc:
                raise InfrastructureError(
                    f"Could not persist {type(entry.aggregate).__name__} {entry.aggregate.id}: {exc}"
                ) from exc

            logger.debug(
                "Aggregate persisted",
                aggregate=type(entry.aggregate).__name__,
                aggregate_id=str(entry.aggregate.id),
                version=entry.aggregate.version,
                removed=entry.removed,
            )

    def _check_version(self, entry: _Tracked) -> None:
        aggregate = entry.aggregate
        name = type(aggregate).__name__
        persisted = self._persisted_version(aggregate)

        if entry.is_new:
            if persisted is not None:
                raise ConcurrencyConflictError(name, str(aggregate.id), None, persisted)
            return

        if persisted != entry.expected_version:
            logger.warning(
                "Concurrent modification detected",
                aggregate=name,
                aggregate_id=str(aggregate.id),
                expected=entry.expected_version,
                actual=persisted,
            )
            raise ConcurrencyConflictError(name, str(aggregate.id), entry.expected_version, persisted)

    def _persisted_version(self, aggregate) -> int | None:
        dao = self.domain.repository_for(type(aggregate))._dao
        try:
            return dao.get(str(aggregate.id)).version
        except ObjectNotFoundError:
            return None
