"""Fixtures for cross-context checkout tests.

Commands go through each context's ``send()``; reads open the owning
domain's context explicitly, since no single domain is active here.
"""

import json

import pytest


def _order_command_values(items):
    return {
        "customer_id": "cust-saga-001",
        "street": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "country": "US",
        "zip_code": "62701",
        "currency": "USD",
        "items": json.dumps(items),
    }


@pytest.fixture()
def place_order(app_context):
    """Create a Draft order through the Ordering context and return its id."""
    from ordering.order.creation import CreateOrder

    def _place(items=None, context=None):
        items = items or [
            {"product_id": "prod-001", "product_name": "Widget", "unit_price": 25.0, "quantity": 1},
            {"product_id": "prod-002", "product_name": "Gadget", "unit_price": 30.0, "quantity": 2},
        ]
        context = context or app_context.ordering
        return context.send(CreateOrder(**_order_command_values(items)))

    return _place


@pytest.fixture()
def load_order(app_context):
    from ordering.order.queries import get_order_by_id

    def _load(order_id):
        with app_context.ordering.domain.domain_context():
            return get_order_by_id(order_id)

    return _load


@pytest.fixture()
def payment_for(app_context):
    from payments.payment.queries import get_payment_by_order_id

    def _load(order_id):
        with app_context.payments.domain.domain_context():
            return get_payment_by_order_id(order_id)

    return _load


@pytest.fixture()
def count_payments(app_context):
    from payments.payment.payment import Payment

    def _count():
        with app_context.payments.domain.domain_context():
            return app_context.payments.domain.repository_for(Payment)._dao.query.all().total

    return _count
