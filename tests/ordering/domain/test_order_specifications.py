"""In-memory evaluation of the Order specifications."""

from datetime import UTC, datetime, timedelta

from ordering.order.identifiers import CustomerId, ProductId
from ordering.order.order import Address, Money, Order
from ordering.order.specifications import (
    CancellableOrderSpecification,
    MaxItemsCountSpecification,
    MinimumOrderValueSpecification,
    OrderReadyForProcessingSpecification,
    OrdersByCustomerSpecification,
    OverdueOrderSpecification,
    PendingOrderSpecification,
)


def _make_order(customer_id="cust-001", price=40.0, quantity=1):
    order = Order.create(
        CustomerId.from_raw(customer_id),
        Address(street="1 Main St", city="Springfield", country="US", zip_code="62701"),
        "USD",
    )
    order.add_item(ProductId.from_raw("prod-001"), "Widget", Money.of(price, "USD"), quantity)
    return order


class TestStatusSpecifications:
    def test_draft_order_is_cancellable_but_not_pending(self):
        order = _make_order()
        assert CancellableOrderSpecification().is_satisfied_by(order)
        assert not PendingOrderSpecification().is_satisfied_by(order)

    def test_submitted_order_is_pending_and_cancellable(self):
        order = _make_order()
        order.submit()
        assert PendingOrderSpecification().is_satisfied_by(order)
        assert CancellableOrderSpecification().is_satisfied_by(order)

    def test_paid_order_is_ready_for_processing(self):
        order = _make_order()
        order.submit()
        order.mark_as_paid()
        assert OrderReadyForProcessingSpecification().is_satisfied_by(order)
        assert not CancellableOrderSpecification().is_satisfied_by(order)


class TestOverdueOrderSpecification:
    def test_submitted_order_past_cutoff_is_overdue(self):
        order = _make_order()
        order.submit()
        later = order.submitted_at + timedelta(hours=25)
        assert OverdueOrderSpecification(hours=24, now=later).is_satisfied_by(order)

    def test_recent_submission_is_not_overdue(self):
        order = _make_order()
        order.submit()
        later = order.submitted_at + timedelta(hours=1)
        assert not OverdueOrderSpecification(hours=24, now=later).is_satisfied_by(order)

    def test_draft_order_is_never_overdue(self):
        order = _make_order()
        far_future = datetime.now(UTC) + timedelta(days=30)
        assert not OverdueOrderSpecification(hours=24, now=far_future).is_satisfied_by(order)


class TestValueAndOwnership:
    def test_minimum_order_value(self):
        order = _make_order(price=40.0)
        assert MinimumOrderValueSpecification(40.0).is_satisfied_by(order)
        assert not MinimumOrderValueSpecification(40.01).is_satisfied_by(order)

    def test_orders_by_customer(self):
        order = _make_order(customer_id="cust-042")
        assert OrdersByCustomerSpecification("cust-042").is_satisfied_by(order)
        assert not OrdersByCustomerSpecification("cust-001").is_satisfied_by(order)

    def test_combined_specification(self):
        order = _make_order(customer_id="cust-042", price=120.0)
        spec = OrdersByCustomerSpecification("cust-042") & MinimumOrderValueSpecification(100.0)
        assert spec.is_satisfied_by(order)
        assert not (spec & ~CancellableOrderSpecification()).is_satisfied_by(order)


class TestMaxItemsCountSpecification:
    def test_counts_lines(self):
        order = _make_order()
        order.add_item(ProductId.from_raw("prod-002"), "Gadget", Money.of(5.0, "USD"), 1)
        assert MaxItemsCountSpecification(2).is_satisfied_by(order)
        assert not MaxItemsCountSpecification(1).is_satisfied_by(order)

    def test_is_not_pushed_down(self):
        assert MaxItemsCountSpecification(2).pushdown is False
