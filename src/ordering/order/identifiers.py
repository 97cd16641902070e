"""Typed identifiers used by the Ordering context."""

from shared.identifiers import TypedId


class OrderId(TypedId):
    __slots__ = ()


class OrderItemId(TypedId):
    __slots__ = ()


class CustomerId(TypedId):
    __slots__ = ()


class ProductId(TypedId):
    __slots__ = ()
