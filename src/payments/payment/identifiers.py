"""Typed identifiers used by the Payments context.

Orders and customers belong to other contexts; Payments holds them only as
opaque references.
"""

from shared.identifiers import TypedId


class PaymentId(TypedId):
    __slots__ = ()


class OrderReference(TypedId):
    __slots__ = ()


class CustomerReference(TypedId):
    __slots__ = ()
