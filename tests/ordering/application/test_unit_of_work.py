import pytest
from ordering.order.events import OrderCreated, OrderItemAdded, OrderSubmitted
from ordering.order.identifiers import CustomerId, ProductId
from ordering.order.order import Address, Money, Order
from ordering.order.submission import SubmitOrder
from protean import current_domain
from shared.cancellation import CancellationToken
from shared.config import Settings
from shared.errors import ConcurrencyConflictError, OperationCancelledError
from shared.events.ordering import OrderSubmittedIntegrationEvent
from structlog.testing import capture_logs


def _new_order():
    order = Order.create(
        CustomerId.from_raw("cust-001"),
        Address(street="1 Main St", city="Springfield", country="US", zip_code="62701"),
    )
    order.add_item(ProductId.from_raw("prod-001"), "Widget", Money.of(25.0, "USD"), 2)
    return order


def _exists(order):
    return current_domain.repository_for(Order).exists(str(order.id))


@pytest.fixture()
def add_handler(app_context, monkeypatch):
    """Route an extra event handler through the Ordering domain for one test."""
    domain = app_context.ordering.domain
    original = domain.handlers_for
    routes = {}

    def handlers_for(event):
        return original(event) | routes.get(type(event), set())

    monkeypatch.setattr(domain, "handlers_for", handlers_for)

    def _add(event_cls, fn):
        handler = type(f"Test{fn.__name__.title()}", (), {"_handle": classmethod(lambda cls, event: fn(event))})
        routes.setdefault(event_cls, set()).add(handler)

    return _add


def _save(context, order):
    with context.unit_of_work() as uow:
        uow.register(order)
        return uow.save_entities()


class TestSaveEntities:
    def test_returns_events_in_raise_order(self, app_context):
        order = _new_order()
        events = _save(app_context.ordering, order)

        assert [type(event) for event in events] == [OrderCreated, OrderItemAdded]
        assert order._events == []
        assert _exists(order)

    def test_dispatches_to_local_handlers(self, app_context, add_handler):
        seen = []
        add_handler(OrderCreated, seen.append)

        order = _new_order()
        _save(app_context.ordering, order)

        assert len(seen) == 1
        assert seen[0].order_id == str(order.id)

    def test_dispatch_is_logged_with_the_event_type(self, app_context):
        with capture_logs() as logs:
            _save(app_context.ordering, _new_order())

        dispatched = [entry for entry in logs if entry["event"] == "Dispatching domain event"]
        assert OrderCreated.__type__ in {entry["event_type"] for entry in dispatched}
        assert {entry["handler"] for entry in dispatched} >= {"OrderLifecycleLogger"}

    def test_submitted_order_publishes_integration_event(self, app_context):
        order = _new_order()
        order.submit()
        _save(app_context.ordering, order)

        pending = app_context.bus.pending
        assert len(pending) == 1
        assert isinstance(pending[0], OrderSubmittedIntegrationEvent)
        assert pending[0].order_id == str(order.id)
        assert pending[0].total_amount == 50.0

    def test_tracked_aggregates_are_cleared_after_commit(self, app_context):
        uow = app_context.ordering.unit_of_work()
        uow.register(_new_order())
        uow.save_entities()
        assert uow.tracked == []


class TestHandlerFailure:
    @pytest.fixture()
    def failing_handler(self, add_handler):
        def fail(event):
            raise RuntimeError("handler exploded")

        add_handler(OrderItemAdded, fail)

    def test_nothing_is_persisted_and_events_are_restored(self, app_context, failing_handler):
        order = _new_order()
        uow = app_context.ordering.unit_of_work()
        uow.register(order)

        with pytest.raises(RuntimeError):
            uow.save_entities()

        assert not _exists(order)
        assert [type(event) for event in order._events] == [OrderCreated, OrderItemAdded]

    def test_commit_first_keeps_the_write(self, app_context, failing_handler):
        context = app_context.ordering
        context.settings = Settings(dispatch_before_commit=False)
        order = _new_order()

        with pytest.raises(RuntimeError):
            _save(context, order)

        assert _exists(order)


class TestOptimisticConcurrency:
    def test_stale_writer_is_rejected(self, app_context):
        context = app_context.ordering
        order = _new_order()
        _save(context, order)

        first = context.unit_of_work()
        second = context.unit_of_work()
        mine = first.load(Order, str(order.id))
        theirs = second.load(Order, str(order.id))

        mine.set_notes("First writer")
        first.save_entities()

        theirs.set_notes("Second writer")
        with pytest.raises(ConcurrencyConflictError) as exc:
            second.save_entities()

        assert exc.value.expected == 1
        assert exc.value.actual == 2
        assert current_domain.repository_for(Order).get(str(order.id)).notes == "First writer"

    def test_registering_an_existing_aggregate_as_new_conflicts(self, app_context):
        order = _new_order()
        _save(app_context.ordering, order)

        copy = current_domain.repository_for(Order).get(str(order.id))
        with pytest.raises(ConcurrencyConflictError):
            _save(app_context.ordering, copy)

    def test_remove(self, app_context):
        context = app_context.ordering
        order = _new_order()
        _save(context, order)

        with context.unit_of_work() as uow:
            uow.remove(uow.load(Order, str(order.id)))
            uow.save_entities()

        assert not _exists(order)


class TestCancellation:
    def test_cancelled_token_aborts_before_writing(self, app_context):
        token = CancellationToken()
        token.cancel()
        order = _new_order()
        uow = app_context.ordering.unit_of_work(token=token)
        uow.register(order)

        with pytest.raises(OperationCancelledError):
            uow.save_entities()

        assert not _exists(order)

    def test_expired_deadline_aborts(self, app_context):
        uow = app_context.ordering.unit_of_work(token=CancellationToken(timeout=0))
        with pytest.raises(OperationCancelledError):
            uow.load(Order, "anything")


class TestOutbox:
    def test_failed_command_releases_no_integration_events(self, app_context, add_handler):
        def fail(event):
            raise RuntimeError("after publish")

        add_handler(OrderSubmitted, fail)
        order = _new_order()
        _save(app_context.ordering, order)

        with pytest.raises(RuntimeError):
            app_context.ordering.send(SubmitOrder(order_id=str(order.id)))

        assert app_context.bus.pending == []
        assert current_domain.repository_for(Order).get(str(order.id)).status == "Draft"
