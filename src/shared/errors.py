"""Error taxonomy shared by both bounded contexts.

Domain rule violations are recoverable by the caller and carry a stable
machine-readable code. Infrastructure errors are retryable and must never be
confused with domain failures.
"""

from protean.exceptions import ValidationError


class BusinessRuleViolationError(ValidationError):
    """A guard or invariant of an aggregate was broken."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__({code: [message]})

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ConcurrencyConflictError(Exception):
    """The persisted version of an aggregate no longer matches the loaded one."""

    def __init__(self, aggregate: str, identifier: str, expected: int | None, actual: int | None):
        self.aggregate = aggregate
        self.identifier = identifier
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{aggregate} {identifier} was modified concurrently (expected version {expected}, found {actual})"
        )


class TranslationError(Exception):
    """Malformed data reached an anti-corruption boundary."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)


class SerializationError(Exception):
    """No codec is registered for the requested type."""


class InfrastructureError(Exception):
    """A collaborator (store, transport) failed. Callers may retry."""

    retryable = True

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class OperationCancelledError(InfrastructureError):
    """The operation was cancelled or ran past its deadline."""
