"""Shared BDD fixtures and step definitions for the checkout saga."""

import json

import pytest
from ordering.order.creation import CreateOrder
from ordering.order.queries import get_order_by_id
from payments.payment.queries import get_payment_by_order_id
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for the rejection raised by a When step."""
    return {"exc": None}


@pytest.fixture()
def attempt(error):
    def _attempt(send, command):
        try:
            return send(command)
        except ValidationError as exc:
            error["exc"] = exc

    return _attempt


def _order(app_context, order_id):
    with app_context.ordering.domain.domain_context():
        return get_order_by_id(order_id)


def _payment(app_context, order_id):
    with app_context.payments.domain.domain_context():
        return get_payment_by_order_id(order_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a draft order for customer "{customer_id}" with items:'), target_fixture="order_id")
def draft_order(app_context, customer_id, datatable):
    header, *rows = datatable
    items = [dict(zip(header, row)) for row in rows]
    for item in items:
        item["unit_price"] = float(item["unit_price"])
        item["quantity"] = int(item["quantity"])

    return app_context.ordering.send(
        CreateOrder(
            customer_id=customer_id,
            street="1 Main St",
            city="Springfield",
            state="IL",
            country="US",
            zip_code="62701",
            currency="USD",
            items=json.dumps(items),
        )
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(app_context, order_id, status):
    assert _order(app_context, order_id).status == status


@then(parsers.cfparse("the order total is {total:f}"))
def order_total_is(app_context, order_id, total):
    assert _order(app_context, order_id).total_amount == total


@then(parsers.cfparse('the order payment failure reason is "{reason}"'))
def order_failure_reason_is(app_context, order_id, reason):
    assert _order(app_context, order_id).payment_failure_reason == reason


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status_is(app_context, order_id, status):
    assert _payment(app_context, order_id).status == status


@then(parsers.cfparse('a "{method}" payment of {amount:f} is "{status}" for the order'))
def payment_opened(app_context, order_id, method, amount, status):
    payment = _payment(app_context, order_id)
    assert payment.method == method
    assert payment.amount.amount == amount
    assert payment.status == status


@then(parsers.cfparse('the request is rejected with "{code}"'))
def request_rejected(error, code):
    assert error["exc"] is not None
    assert error["exc"].code == code
