"""Cooperative cancellation for command processing.

Long-running steps (persistence, event delivery) call
``raise_if_cancelled()`` between units of work so that a timed-out command
aborts before its changes are written.
"""

import time
from contextlib import contextmanager
from contextvars import ContextVar

from shared.errors import OperationCancelledError

_current_token: ContextVar["CancellationToken | None"] = ContextVar("cancellation_token", default=None)


class CancellationToken:
    def __init__(self, timeout: float | None = None):
        self._deadline = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = False
        self.reason: str | None = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self._cancelled = True
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._cancelled = True
            self.reason = "deadline exceeded"
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelledError(f"Operation aborted: {self.reason}")


def current_token() -> CancellationToken | None:
    return _current_token.get()


@contextmanager
def cancellation_scope(token: CancellationToken):
    """Make ``token`` the active token for the duration of the block."""
    reset = _current_token.set(token)
    try:
        yield token
    finally:
        _current_token.reset(reset)
