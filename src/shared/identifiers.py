"""Strongly typed identifiers.

Identifiers never convert implicitly to or from raw strings: use
``from_raw`` at the boundary and ``raw()`` when handing a value to the store
or to another context.
"""

from uuid import uuid4

from shared.errors import TranslationError


class TypedId:
    __slots__ = ("_value",)

    def __init__(self, value: str):
        self._value = value

    @classmethod
    def new(cls):
        return cls(str(uuid4()))

    @classmethod
    def from_raw(cls, raw):
        if not isinstance(raw, str):
            raise TranslationError(f"expected a string, got {type(raw).__name__}", field=cls.__name__)
        if not raw.strip():
            raise TranslationError("identifier cannot be blank", field=cls.__name__)
        return cls(raw.strip())

    def raw(self) -> str:
        return self._value

    def __eq__(self, other):
        return type(other) is type(self) and other._value == self._value

    def __hash__(self):
        return hash((type(self).__name__, self._value))

    def __repr__(self):
        return f"{type(self).__name__}({self._value!r})"

    def __str__(self):
        return self._value
