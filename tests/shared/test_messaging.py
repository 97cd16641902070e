"""Tests for reading integration events and the in-memory event bus."""

import json
from contextlib import nullcontext
from uuid import uuid4

import pytest
from ordering.domain import ordering
from protean.core.event import BaseEvent
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from shared.cancellation import CancellationToken
from shared.errors import InfrastructureError, OperationCancelledError, TranslationError
from shared.messaging import Inbox, InMemoryEventBus, read_event, type_of


class ThingHappened(BaseEvent):
    event_id = Identifier(default=lambda: str(uuid4()))
    thing_id = String(required=True, max_length=50)
    count = Integer(default=1)


class OtherThingHappened(BaseEvent):
    event_id = Identifier(default=lambda: str(uuid4()))
    note = String(required=True)


ordering.register_external_event(ThingHappened, "Tests.ThingHappened.v1")
ordering.register_external_event(OtherThingHappened, "Tests.OtherThingHappened.v1")


class StubDomain:
    """Routes events to plain functions, the way a domain routes them to its handlers."""

    def __init__(self, name="stub"):
        self.name = name
        self.routes = {}

    def on(self, event_cls, fn):
        handler = type(fn.__name__, (), {"_handle": classmethod(lambda cls, event: fn(event))})
        self.routes.setdefault(event_cls, []).append(handler)
        return handler

    def handlers_for(self, event):
        return set(self.routes.get(type(event), []))

    def domain_context(self):
        return nullcontext()


def connected(bus, name="stub"):
    domain = StubDomain(name)
    bus.connect(domain)
    return domain


class FlakyHandler:
    def __init__(self, failures=1):
        self.failures = failures
        self.seen = []

    def flaky(self, event):
        if self.failures:
            self.failures -= 1
            raise InfrastructureError("store unavailable")
        self.seen.append(event)


class TestReadEvent:
    def test_event_carries_its_type_string(self):
        event = ThingHappened(thing_id="t-1")
        assert event.event_id
        assert type_of(event) == "Tests.ThingHappened.v1"

    def test_event_is_immutable(self):
        event = ThingHappened(thing_id="t-1")
        with pytest.raises(Exception):
            event.thing_id = "t-2"

    def test_reads_dict_and_json(self):
        from_dict = read_event(ThingHappened, {"thing_id": "t-1", "count": 3})
        from_json = read_event(ThingHappened, json.dumps(from_dict.payload))
        assert from_json.event_id == from_dict.event_id
        assert (from_json.thing_id, from_json.count) == ("t-1", 3)

    def test_ignores_metadata_key(self):
        event = read_event(ThingHappened, {"thing_id": "t-1", "_metadata": {"id": "x"}})
        assert event.thing_id == "t-1"

    def test_returns_instances_unchanged(self):
        event = ThingHappened(thing_id="t-1")
        assert read_event(ThingHappened, event) is event

    def test_rejects_missing_fields(self):
        with pytest.raises(TranslationError) as exc:
            read_event(ThingHappened, {"count": 2})
        assert exc.value.field == "thing_id"

    def test_rejects_unknown_fields(self):
        with pytest.raises(TranslationError):
            read_event(ThingHappened, {"thing_id": "t-1", "colour": "red"})

    @pytest.mark.parametrize("value", [None, 42, "not json", "[1, 2]"])
    def test_rejects_garbage(self, value):
        with pytest.raises(TranslationError):
            read_event(ThingHappened, value)


class TestInbox:
    def test_remembers_recorded_ids(self):
        inbox = Inbox()
        inbox.record("e-1")
        assert "e-1" in inbox
        assert "e-2" not in inbox

    def test_forgets_oldest_ids_beyond_capacity(self):
        inbox = Inbox(capacity=2)
        for event_id in ("e-1", "e-2", "e-3"):
            inbox.record(event_id)

        assert len(inbox) == 2
        assert "e-1" not in inbox
        assert "e-2" in inbox and "e-3" in inbox

    def test_recording_again_refreshes_an_id(self):
        inbox = Inbox(capacity=2)
        inbox.record("e-1")
        inbox.record("e-2")
        inbox.record("e-1")
        inbox.record("e-3")

        assert "e-1" in inbox
        assert "e-2" not in inbox


class TestPublishAndDeliver:
    def test_events_are_queued_until_delivered(self):
        bus = InMemoryEventBus()
        seen = []
        connected(bus).on(ThingHappened, seen.append)

        bus.publish(ThingHappened(thing_id="t-1"))
        assert seen == []
        assert len(bus.pending) == 1

        assert bus.deliver_pending() == 1
        assert [e.thing_id for e in seen] == ["t-1"]
        assert bus.pending == []

    def test_delivery_is_fifo(self):
        bus = InMemoryEventBus()
        seen = []
        connected(bus).on(ThingHappened, seen.append)

        for thing_id in ("a", "b", "c"):
            bus.publish(ThingHappened(thing_id=thing_id))
        bus.deliver_pending()

        assert [e.thing_id for e in seen] == ["a", "b", "c"]

    def test_only_matching_handlers_are_called(self):
        bus = InMemoryEventBus()
        things, others = [], []
        domain = connected(bus)
        domain.on(ThingHappened, things.append)
        domain.on(OtherThingHappened, others.append)

        bus.publish(OtherThingHappened(note="hi"))
        bus.deliver_pending()

        assert things == []
        assert len(others) == 1

    def test_handlers_run_in_name_order_within_a_domain(self):
        bus = InMemoryEventBus()
        calls = []
        domain = connected(bus)

        def zeta(event):
            calls.append("zeta")

        def alpha(event):
            calls.append("alpha")

        domain.on(ThingHappened, zeta)
        domain.on(ThingHappened, alpha)
        bus.publish(ThingHappened(thing_id="t-1"))
        bus.deliver_pending()

        assert calls == ["alpha", "zeta"]

    def test_every_connected_domain_receives_the_event(self):
        bus = InMemoryEventBus()
        first, second = [], []
        connected(bus, "first").on(ThingHappened, first.append)
        connected(bus, "second").on(ThingHappened, second.append)

        bus.publish(ThingHappened(thing_id="t-1"))
        bus.deliver_pending()

        assert len(first) == len(second) == 1

    def test_connecting_twice_delivers_once(self):
        bus = InMemoryEventBus()
        seen = []
        domain = connected(bus)
        domain.on(ThingHappened, seen.append)
        bus.connect(domain)

        bus.publish(ThingHappened(thing_id="t-1"))
        bus.deliver_pending()

        assert len(seen) == 1

    def test_events_published_during_delivery_are_delivered_after(self):
        bus = InMemoryEventBus()
        order = []
        domain = connected(bus)

        def first(event):
            order.append(("thing", event.thing_id))
            bus.publish(OtherThingHappened(note="follow-up"))
            bus.deliver_pending()  # nested call defers to the outer loop

        domain.on(ThingHappened, first)
        domain.on(OtherThingHappened, lambda event: order.append(("other", event.note)))

        bus.publish(ThingHappened(thing_id="t-1"))
        bus.publish(ThingHappened(thing_id="t-2"))
        assert bus.deliver_pending() == 4

        assert order == [("thing", "t-1"), ("thing", "t-2"), ("other", "follow-up"), ("other", "follow-up")]


class TestOutbox:
    def test_outbox_releases_events_on_success(self):
        bus = InMemoryEventBus()
        with bus.outbox():
            bus.publish(ThingHappened(thing_id="t-1"))
            assert bus.pending == []
        assert len(bus.pending) == 1

    def test_outbox_discards_events_on_failure(self):
        bus = InMemoryEventBus()
        with pytest.raises(RuntimeError):
            with bus.outbox():
                bus.publish(ThingHappened(thing_id="t-1"))
                raise RuntimeError("command failed")
        assert bus.pending == []

    def test_nested_outboxes(self):
        bus = InMemoryEventBus()
        with bus.outbox():
            with bus.outbox():
                bus.publish(ThingHappened(thing_id="inner"))
            assert bus.pending == []
        assert [e.thing_id for e in bus.pending] == ["inner"]


class TestFailures:
    def test_domain_rejection_becomes_a_dead_letter(self):
        bus = InMemoryEventBus()
        seen = []
        domain = connected(bus)

        def reject(event):
            raise ValidationError({"status": ["Invalid transition"]})

        domain.on(ThingHappened, reject)
        domain.on(ThingHappened, seen.append)
        bus.publish(ThingHappened(thing_id="t-1"))
        bus.deliver_pending()

        assert len(bus.dead_letters) == 1
        assert bus.dead_letters[0].event.thing_id == "t-1"
        assert bus.dead_letters[0].handler == "stub.reject"
        assert len(seen) == 1
        assert bus.pending == []

    def test_dead_letters_keep_only_the_most_recent(self):
        bus = InMemoryEventBus(dead_letter_capacity=2)

        def reject(event):
            raise TranslationError("unreadable")

        connected(bus).on(ThingHappened, reject)
        for thing_id in ("a", "b", "c"):
            bus.publish(ThingHappened(thing_id=thing_id))
        bus.deliver_pending()

        assert [letter.event.thing_id for letter in bus.dead_letters] == ["b", "c"]

    def test_infrastructure_failure_keeps_event_queued(self):
        bus = InMemoryEventBus()
        flaky = FlakyHandler(failures=1)
        connected(bus).on(ThingHappened, flaky.flaky)
        bus.publish(ThingHappened(thing_id="t-1"))

        with pytest.raises(InfrastructureError):
            bus.deliver_pending()
        assert len(bus.pending) == 1

        assert bus.deliver_pending() == 1
        assert len(flaky.seen) == 1

    def test_retry_skips_handlers_that_already_handled_the_event(self):
        bus = InMemoryEventBus()
        seen = []
        flaky = FlakyHandler(failures=1)
        domain = connected(bus)
        domain.on(ThingHappened, seen.append)
        domain.on(ThingHappened, flaky.flaky)
        bus.publish(ThingHappened(thing_id="t-1"))

        with pytest.raises(InfrastructureError):
            bus.deliver_pending()
        bus.deliver_pending()

        assert len(seen) == 1
        assert len(flaky.seen) == 1

    def test_cancelled_token_stops_delivery(self):
        bus = InMemoryEventBus()
        seen = []
        connected(bus).on(ThingHappened, seen.append)
        bus.publish(ThingHappened(thing_id="t-1"))

        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            bus.deliver_pending(token)
        assert seen == []
        assert len(bus.pending) == 1


class TestReceive:
    def test_receive_parses_wire_payload(self):
        bus = InMemoryEventBus()
        bus.register_event_type(ThingHappened)
        seen = []
        connected(bus).on(ThingHappened, seen.append)

        event = bus.receive("Tests.ThingHappened.v1", '{"thing_id": "t-7", "count": 2}')
        bus.deliver_pending()

        assert event.count == 2
        assert seen == [event]

    def test_receive_rejects_unknown_types(self):
        bus = InMemoryEventBus()
        with pytest.raises(TranslationError) as exc:
            bus.receive("Tests.NothingHappened.v1", "{}")
        assert exc.value.field == "event_type"

    def test_receive_rejects_malformed_payloads(self):
        bus = InMemoryEventBus()
        bus.register_event_type(ThingHappened)
        with pytest.raises(TranslationError):
            bus.receive("Tests.ThingHappened.v1", {"thing_id": ""})
        assert bus.pending == []
