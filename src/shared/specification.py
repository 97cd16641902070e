"""Composable predicate trees with two interpreters.

A predicate is built from field comparisons joined with ``&``, ``|`` and
``~``. The same tree can be evaluated against an in-memory object with
``is_satisfied_by`` or lowered to a protean ``Q`` expression with
``to_query`` and pushed down to the repository.

Both interpreters agree on missing values: a comparison against a field
that is None is false, and so is its negation, the way a store treats
NULL. Negations are pushed down to the comparisons before either
interpreter runs, so ``~(a & b)`` is evaluated as ``~a | ~b``.

    spec = (Field("status") == "Submitted") & (Field("submitted_at") < cutoff)
    spec.is_satisfied_by(order)
    repo._dao.query.filter(spec.to_query())
"""

import operator
from typing import Any, Callable

from protean.utils.query import Q


def _resolve(obj: Any, path: str) -> Any:
    value = obj
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


def _ordered(compare: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    """Ordering comparisons are never satisfied by a missing value."""

    def _compare(left: Any, right: Any) -> bool:
        if left is None or right is None:
            return False
        return compare(left, right)

    return _compare


class Predicate:
    """Base node of the predicate tree."""

    pushdown = True

    def is_satisfied_by(self, candidate: Any) -> bool:
        raise NotImplementedError

    def to_query(self) -> Q:
        raise NotImplementedError

    def negated(self) -> "Predicate | None":
        """This node's negation with ``~`` pushed down to the comparisons.

        None when the node can only be negated as a whole.
        """
        return None

    def __and__(self, other: "Predicate") -> "Predicate":
        return And(self, _as_predicate(other))

    def __or__(self, other: "Predicate") -> "Predicate":
        return Or(self, _as_predicate(other))

    def __invert__(self) -> "Predicate":
        return Not(self)


class Comparison(Predicate):
    # lookup name -> in-memory operator
    OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
        "exact": operator.eq,
        "ne": operator.ne,
        "lt": _ordered(operator.lt),
        "lte": _ordered(operator.le),
        "gt": _ordered(operator.gt),
        "gte": _ordered(operator.ge),
        "in": lambda left, right: left in right,
    }

    def __init__(self, path: str, lookup: str, value: Any, negate: bool = False):
        if lookup not in self.OPERATORS:
            raise ValueError(f"Unsupported lookup: {lookup}")
        self.path = path
        self.lookup = lookup
        self.value = value
        self.negate = negate

    @property
    def attribute(self) -> str:
        """Flat attribute name used by the store (value object fields are shadowed as ``vo_field``)."""
        return self.path.replace(".", "_")

    def is_satisfied_by(self, candidate: Any) -> bool:
        actual = _resolve(candidate, self.path)
        if actual is None:
            return False
        result = self.OPERATORS[self.lookup](actual, self.value)
        return not result if self.negate else result

    def negated(self) -> "Comparison":
        return Comparison(self.path, self.lookup, self.value, negate=not self.negate)

    def to_query(self) -> Q:
        negate = self.negate
        if self.lookup == "ne":
            query, negate = Q(**{self.attribute: self.value}), not negate
        elif self.lookup == "in":
            query = Q(**{f"{self.attribute}__in": list(self.value)})
        else:
            query = Q(**{f"{self.attribute}__{self.lookup}": self.value})
        return ~query if negate else query

    def __repr__(self) -> str:
        prefix = "~" if self.negate else ""
        return f"{prefix}Comparison({self.path!r}, {self.lookup!r}, {self.value!r})"


class And(Predicate):
    def __init__(self, left: Predicate, right: Predicate):
        self.left = left
        self.right = right

    @property
    def pushdown(self) -> bool:
        return self.left.pushdown and self.right.pushdown

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(candidate)

    def negated(self) -> Predicate | None:
        left, right = self.left.negated(), self.right.negated()
        if left is None or right is None:
            return None
        return Or(left, right)

    def to_query(self) -> Q:
        return self.left.to_query() & self.right.to_query()


class Or(Predicate):
    def __init__(self, left: Predicate, right: Predicate):
        self.left = left
        self.right = right

    @property
    def pushdown(self) -> bool:
        return self.left.pushdown and self.right.pushdown

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) or self.right.is_satisfied_by(candidate)

    def negated(self) -> Predicate | None:
        left, right = self.left.negated(), self.right.negated()
        if left is None or right is None:
            return None
        return And(left, right)

    def to_query(self) -> Q:
        return self.left.to_query() | self.right.to_query()


class Not(Predicate):
    def __init__(self, operand: Predicate):
        self.operand = operand

    @property
    def pushdown(self) -> bool:
        return self.operand.pushdown

    def is_satisfied_by(self, candidate: Any) -> bool:
        normal = self.operand.negated()
        if normal is None:
            return not self.operand.is_satisfied_by(candidate)
        return normal.is_satisfied_by(candidate)

    def negated(self) -> Predicate:
        return self.operand

    def to_query(self) -> Q:
        normal = self.operand.negated()
        if normal is None:
            return ~self.operand.to_query()
        return normal.to_query()


class Field:
    """Entry point for building comparisons on a (possibly dotted) attribute path."""

    def __init__(self, path: str):
        self.path = path

    def __eq__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.path, "exact", value)

    def __ne__(self, value: Any) -> Comparison:  # type: ignore[override]
        return Comparison(self.path, "ne", value)

    def __lt__(self, value: Any) -> Comparison:
        return Comparison(self.path, "lt", value)

    def __le__(self, value: Any) -> Comparison:
        return Comparison(self.path, "lte", value)

    def __gt__(self, value: Any) -> Comparison:
        return Comparison(self.path, "gt", value)

    def __ge__(self, value: Any) -> Comparison:
        return Comparison(self.path, "gte", value)

    def is_in(self, values) -> Comparison:
        return Comparison(self.path, "in", tuple(values))

    __hash__ = None  # type: ignore[assignment]


class Specification(Predicate):
    """A named, reusable predicate.

    Subclasses implement ``predicate()``; evaluation and lowering are
    delegated to the tree it returns. Specifications that only make sense in
    memory override ``is_satisfied_by`` and leave ``pushdown`` False.
    """

    pushdown = True

    def predicate(self) -> Predicate:
        raise NotImplementedError

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.predicate().is_satisfied_by(candidate)

    def negated(self) -> Predicate | None:
        return self.predicate().negated() if self.pushdown else None

    def to_query(self) -> Q:
        if not self.pushdown:
            raise NotImplementedError(f"{type(self).__name__} cannot be pushed down to the store")
        return self.predicate().to_query()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _as_predicate(value: Any) -> Predicate:
    if not isinstance(value, Predicate):
        raise TypeError(f"Cannot compose a specification with {type(value).__name__}")
    return value
