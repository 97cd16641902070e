"""Order aggregate: the consistency boundary of the Ordering context.

An order is opened in Draft, collects line items, and is frozen by
``submit()``. From then on it only moves forward through payment and
fulfilment, or is cancelled. Every behavior method validates its guard rules
before touching state, bumps ``version`` (the optimistic-concurrency counter
checked by the unit of work) and returns the domain event it raised, if any.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject
from shared.config import get_settings
from shared.errors import BusinessRuleViolationError
from shared.rules import RequiredValueRule, check_rule

from ordering.domain import ordering
from ordering.order.events import (
    OrderCancelled,
    OrderCreated,
    OrderDelivered,
    OrderItemAdded,
    OrderPaid,
    OrderPaymentFailed,
    OrderShipped,
    OrderSubmitted,
)
from ordering.order.identifiers import CustomerId, OrderId, OrderItemId, ProductId
from ordering.order.rules import (
    DiscountCannotExceedSubtotalRule,
    ItemQuantityMustBePositiveRule,
    OrderCannotExceedMaxItemsRule,
    OrderItemMustExistRule,
    OrderMustBeCancellableRule,
    OrderMustBeModifiableRule,
    OrderMustHaveItemsRule,
    OrderMustMeetMinimumValueRule,
    OrderStatusTransitionRule,
)
from ordering.order.status import OrderStatus


def _round(amount: float) -> float:
    return round(float(amount), 2)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object
class Money:
    """A non-negative amount in a single currency.

    Arithmetic is only defined between amounts of the same currency, and a
    subtraction that would go below zero is rejected.
    """

    amount = Float(required=True, min_value=0.0)
    currency = String(required=True, max_length=3)

    @invariant.post
    def currency_must_be_an_iso_code(self):
        if not (self.currency and len(self.currency) == 3 and self.currency.isalpha() and self.currency.isupper()):
            raise ValidationError({"currency": [f"Invalid currency code: {self.currency!r}"]})

    @classmethod
    def of(cls, amount: float, currency: str) -> "Money":
        if not currency or not str(currency).strip():
            raise ValidationError({"currency": ["Currency is required"]})
        return cls(amount=_round(amount), currency=str(currency).strip().upper())

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls.of(0, currency)

    def _assert_same_currency(self, other: "Money") -> None:
        if other.currency != self.currency:
            raise BusinessRuleViolationError(
                "CURRENCY_MISMATCH",
                f"Cannot combine {self.currency} with {other.currency}",
            )

    def add(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money.of(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        result = _round(self.amount - other.amount)
        if result < 0:
            raise BusinessRuleViolationError(
                "NEGATIVE_MONEY",
                f"Subtracting {other.amount:.2f} from {self.amount:.2f} {self.currency} would be negative",
            )
        return Money.of(result, self.currency)

    def multiply(self, factor: float) -> "Money":
        if factor < 0:
            raise BusinessRuleViolationError("NEGATIVE_MULTIPLIER", f"Cannot multiply money by {factor}")
        return Money.of(self.amount * factor, self.currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency}"


@ordering.value_object(part_of="Order")
class Address:
    """Where the order ships to. Replaced wholesale, never edited in place."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    country = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A product line on an order.

    Product name and unit price are snapshots taken when the line was added,
    so later catalog changes never alter an existing order.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    unit_price = ValueObject(Money, required=True)
    quantity = Integer(required=True, min_value=1)
    discount = ValueObject(Money)

    @invariant.post
    def discount_cannot_exceed_subtotal(self):
        if self.discount is None or self.unit_price is None or self.quantity is None:
            return
        if self.discount.amount > _round(self.unit_price.amount * self.quantity):
            raise ValidationError({"discount": ["Discount cannot exceed item subtotal"]})

    def item_id(self) -> OrderItemId:
        return OrderItemId.from_raw(str(self.id))

    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity)

    def total(self) -> Money:
        discount = self.discount or Money.zero(self.unit_price.currency)
        return self.subtotal().subtract(discount)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    shipping_address = ValueObject(Address, required=True)
    status = String(max_length=20, choices=OrderStatus, default=OrderStatus.DRAFT.value)
    currency = String(max_length=3, default="USD")
    items = HasMany(OrderItem)
    total_amount = Float(default=0.0)
    notes = Text()
    cancellation_reason = String(max_length=500)
    payment_failure_reason = String(max_length=500)
    version = Integer(default=0)
    created_at = DateTime()
    modified_at = DateTime()
    submitted_at = DateTime()
    paid_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def total_amount_matches_items(self):
        if abs((self.total_amount or 0.0) - self._computed_total()) > 0.005:
            raise ValidationError({"total_amount": ["Total amount is out of sync with order items"]})

    @invariant.post
    def item_count_within_bounds(self):
        if len(self.items) > get_settings().max_order_items:
            raise ValidationError({"items": [f"Order cannot have more than {get_settings().max_order_items} items"]})
        if self.status not in (OrderStatus.DRAFT.value, OrderStatus.CANCELLED.value) and not self.items:
            raise ValidationError({"items": ["A submitted order must have at least one item"]})

    @invariant.post
    def items_share_order_currency(self):
        for item in self.items:
            if item.unit_price and item.unit_price.currency != self.currency:
                raise ValidationError({"items": [f"Item {item.product_name} is not priced in {self.currency}"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id: CustomerId, shipping_address: Address, currency: str = "USD") -> "Order":
        check_rule(RequiredValueRule(customer_id, "CUSTOMER_ID_REQUIRED", "Customer id"))
        check_rule(RequiredValueRule(shipping_address, "SHIPPING_ADDRESS_REQUIRED", "Shipping address"))
        check_rule(RequiredValueRule(currency, "CURRENCY_REQUIRED", "Currency"))

        now = datetime.now(UTC)
        order = cls(
            customer_id=customer_id.raw(),
            shipping_address=shipping_address,
            currency=currency.strip().upper(),
            status=OrderStatus.DRAFT.value,
            total_amount=0.0,
            version=0,
            created_at=now,
            modified_at=now,
        )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                customer_id=order.customer_id,
                currency=order.currency,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------
    def order_id(self) -> OrderId:
        return OrderId.from_raw(str(self.id))

    def order_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def total(self) -> Money:
        """Sum of every line's ``unit_price * quantity - discount``, recomputed on each call."""
        return Money.of(self._computed_total(), self.currency)

    def find_item(self, item_id: str):
        return next((item for item in self.items if str(item.id) == str(item_id)), None)

    def find_item_by_product(self, product_id: str):
        return next((item for item in self.items if str(item.product_id) == str(product_id)), None)

    def _computed_total(self) -> float:
        return _round(sum(item.total().amount for item in self.items))

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _touch(self, now: datetime | None = None) -> datetime:
        now = now or datetime.now(UTC)
        self.modified_at = now
        self.version = (self.version or 0) + 1
        return now

    def _transition_to(self, target: OrderStatus) -> None:
        check_rule(OrderStatusTransitionRule(self.order_status(), target))

    def _assert_modifiable(self) -> None:
        check_rule(OrderMustBeModifiableRule(self.order_status()))

    # -------------------------------------------------------------------
    # Draft editing
    # -------------------------------------------------------------------
    def add_item(
        self,
        product_id: ProductId,
        product_name: str,
        unit_price: Money,
        quantity: int,
        discount: Money | None = None,
        max_items: int | None = None,
    ) -> OrderItemAdded:
        """Add a product line. Adding a product already on the order merges the quantities."""
        self._assert_modifiable()
        check_rule(ItemQuantityMustBePositiveRule(quantity))
        check_rule(RequiredValueRule(product_name, "PRODUCT_NAME_REQUIRED", "Product name"))
        if unit_price.currency != self.currency:
            raise BusinessRuleViolationError(
                "CURRENCY_MISMATCH", f"Item priced in {unit_price.currency} cannot be added to a {self.currency} order"
            )

        existing = self.find_item_by_product(product_id.raw())
        if existing is not None:
            with atomic_change(self):
                existing.quantity = existing.quantity + quantity
                self.total_amount = self._computed_total()
                self._touch()
            item = existing
        else:
            max_items = max_items if max_items is not None else get_settings().max_order_items
            check_rule(OrderCannotExceedMaxItemsRule(len(self.items), max_items))
            if discount is not None:
                check_rule(DiscountCannotExceedSubtotalRule(discount.amount, unit_price.multiply(quantity).amount))

            item = OrderItem(
                product_id=product_id.raw(),
                product_name=product_name.strip(),
                unit_price=unit_price,
                quantity=quantity,
                discount=discount or Money.zero(self.currency),
            )
            with atomic_change(self):
                self.add_items(item)
                self.total_amount = self._computed_total()
                self._touch()

        event = OrderItemAdded(
            order_id=str(self.id),
            item_id=str(item.id),
            product_id=str(item.product_id),
            product_name=item.product_name,
            unit_price=item.unit_price.amount,
            quantity=quantity,
            currency=self.currency,
        )
        self.raise_(event)
        return event

    def remove_item(self, item_id: str) -> None:
        self._assert_modifiable()
        item = self.find_item(item_id)
        check_rule(OrderItemMustExistRule(item, item_id))

        with atomic_change(self):
            self.remove_items(item)
            self.total_amount = self._computed_total()
            self._touch()

    def update_item_quantity(self, item_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line.

        The change is rolled back if the line's discount would exceed its new
        subtotal.
        """
        self._assert_modifiable()
        item = self.find_item(item_id)
        check_rule(OrderItemMustExistRule(item, item_id))

        if quantity <= 0:
            self.remove_item(item_id)
            return

        previous_quantity, previous_version, previous_modified_at = item.quantity, self.version, self.modified_at
        try:
            discount = item.discount.amount if item.discount else 0.0
            check_rule(DiscountCannotExceedSubtotalRule(discount, item.unit_price.multiply(quantity).amount))
            with atomic_change(self):
                item.quantity = quantity
                self.total_amount = self._computed_total()
                self._touch()
        except ValidationError:
            with atomic_change(self):
                item.quantity = previous_quantity
                self.total_amount = self._computed_total()
                self.version = previous_version
                self.modified_at = previous_modified_at
            raise

    def update_shipping_address(self, address: Address) -> None:
        self._assert_modifiable()
        check_rule(RequiredValueRule(address, "SHIPPING_ADDRESS_REQUIRED", "Shipping address"))
        self.shipping_address = address
        self._touch()

    def set_notes(self, notes: str | None) -> None:
        self._assert_modifiable()
        self.notes = notes
        self._touch()

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def submit(self, minimum_order_value: float | None = None) -> OrderSubmitted:
        """Freeze the items and hand the order over to payment."""
        self._transition_to(OrderStatus.SUBMITTED)
        check_rule(OrderMustHaveItemsRule(len(self.items)))

        total = self.total()
        minimum = minimum_order_value if minimum_order_value is not None else get_settings().min_order_value
        check_rule(OrderMustMeetMinimumValueRule(total.amount, minimum, self.currency))

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.SUBMITTED.value
            self.submitted_at = now
            self.total_amount = total.amount
            self._touch(now)

        event = OrderSubmitted(
            order_id=str(self.id),
            customer_id=str(self.customer_id),
            total_amount=total.amount,
            currency=self.currency,
            submitted_at=now,
        )
        self.raise_(event)
        return event

    def mark_as_paid(self, paid_at: datetime | None = None) -> OrderPaid:
        self._transition_to(OrderStatus.PAID)

        paid_at = paid_at or datetime.now(UTC)
        self.status = OrderStatus.PAID.value
        self.paid_at = paid_at
        self._touch()

        event = OrderPaid(order_id=str(self.id), paid_at=paid_at)
        self.raise_(event)
        return event

    def mark_payment_failed(self, reason: str) -> OrderPaymentFailed:
        self._transition_to(OrderStatus.PAYMENT_FAILED)
        check_rule(RequiredValueRule(reason, "FAILURE_REASON_REQUIRED", "Payment failure reason"))

        now = datetime.now(UTC)
        self.status = OrderStatus.PAYMENT_FAILED.value
        self.payment_failure_reason = reason
        self._touch(now)

        event = OrderPaymentFailed(order_id=str(self.id), reason=reason, failed_at=now)
        self.raise_(event)
        return event

    def start_processing(self) -> None:
        self._transition_to(OrderStatus.PROCESSING)
        self.status = OrderStatus.PROCESSING.value
        self._touch()

    def ship(self) -> OrderShipped:
        self._transition_to(OrderStatus.SHIPPED)

        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.shipped_at = now
        self._touch(now)

        event = OrderShipped(order_id=str(self.id), shipped_at=now)
        self.raise_(event)
        return event

    def mark_as_delivered(self) -> OrderDelivered:
        self._transition_to(OrderStatus.DELIVERED)

        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.delivered_at = now
        self._touch(now)

        event = OrderDelivered(order_id=str(self.id), delivered_at=now)
        self.raise_(event)
        return event

    def cancel(self, reason: str) -> OrderCancelled:
        check_rule(OrderMustBeCancellableRule(self.order_status()))

        now = datetime.now(UTC)
        previous = self.status
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self._touch(now)

        event = OrderCancelled(
            order_id=str(self.id),
            reason=reason,
            previous_status=previous,
            cancelled_at=now,
        )
        self.raise_(event)
        return event
