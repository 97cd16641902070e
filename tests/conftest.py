import os
from contextlib import nullcontext
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    os.environ["ORDERFLOW_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path or "/shared/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session")
def payments_bed():
    from payments.domain import payments

    bed = DomainFixture(payments)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def app_context(ordering_bed, payments_bed):
    """Wire fresh contexts, bus and gateway for every test, and wipe the stores afterwards."""
    from bootstrap import configure
    from payments.gateway import reset_gateway
    from shared.config import reset_settings

    reset_settings()
    reset_gateway()

    app_context = configure()

    yield app_context

    from ordering.domain import ordering
    from payments.domain import payments
    from protean.utils.globals import current_domain
    from shared.context import unregister_all

    for domain in (ordering, payments):
        with domain.domain_context():
            for _, provider in current_domain.providers.items():
                provider._data_reset()

    unregister_all()
    reset_gateway()
    reset_settings()


@pytest.fixture()
def bus(app_context):
    return app_context.bus


class EventRecorder:
    """Stand-in domain that collects integration events delivered by the bus."""

    def __init__(self, *event_classes, name=None):
        self.name = name or f"recorder-{id(self)}"
        self.event_classes = event_classes
        self.seen = []
        recorder = self

        class RecordingHandler:
            @classmethod
            def _handle(cls, event):
                recorder.seen.append(event)

        self.handler = RecordingHandler

    def handlers_for(self, event):
        return {self.handler} if isinstance(event, self.event_classes) else set()

    def domain_context(self):
        return nullcontext()


@pytest.fixture()
def record_events(bus):
    """Connect a recorder for the given event classes; returns its list of seen events."""

    def _record(*event_classes):
        recorder = EventRecorder(*event_classes)
        bus.connect(recorder)
        return recorder.seen

    return _record
