import smtplib
from io import StringIO

import pytest
from django.core.management import call_command

from . import outbox
from .models import Order, OutboxEvent

pytestmark = pytest.mark.django_db(transaction=True)


def _smtp_down(order):
    raise smtplib.SMTPException("connection refused")


def _place(api_client, make_product, order_payload, **overrides):
    p = make_product(quantity=3)
    res = api_client.post("/api/orders", order_payload((p, 1), **overrides), format="json")
    assert res.status_code == 201
    return res.json()["data"]


def test_order_with_email_sends_confirmation_after_commit(api_client, make_product, order_payload, mailoutbox):
    data = _place(api_client, make_product, order_payload)

    event = OutboxEvent.objects.get()
    assert event.event_type == outbox.EVENT_ORDER_PLACED
    assert event.aggregate_id == data["id"]
    assert event.status == OutboxEvent.Status.SENT
    assert event.attempts == 1

    assert sorted(m.to[0] for m in mailoutbox) == ["ayesha@example.com", "owner@example.com"]
    customer_mail = next(m for m in mailoutbox if m.to == ["ayesha@example.com"])
    assert customer_mail.subject == f"Order Confirmation - {data['orderNumber']}"
    assert "Cash on Delivery (COD)" in customer_mail.body
    assert "PKR 4,800.00" in customer_mail.body


def test_mail_failure_never_affects_the_order(api_client, make_product, order_payload, mailoutbox, monkeypatch):
    monkeypatch.setattr(outbox, "send_order_confirmation", _smtp_down)

    data = _place(api_client, make_product, order_payload)

    assert Order.objects.filter(order_number=data["orderNumber"]).exists()
    event = OutboxEvent.objects.get()
    assert event.status == OutboxEvent.Status.FAILED
    assert event.attempts == 1
    assert "connection refused" in event.last_error
    assert mailoutbox == []


def test_dispatch_command_retries_failed_events(api_client, make_product, order_payload, mailoutbox, monkeypatch):
    with monkeypatch.context() as m:
        m.setattr(outbox, "send_order_confirmation", _smtp_down)
        _place(api_client, make_product, order_payload)
    assert OutboxEvent.objects.get().status == OutboxEvent.Status.FAILED

    out = StringIO()
    call_command("dispatch_outbox", stdout=out)

    assert "1 sent, 0 failed" in out.getvalue()
    event = OutboxEvent.objects.get()
    assert event.status == OutboxEvent.Status.SENT
    assert event.attempts == 2
    assert len(mailoutbox) == 2


def test_dispatch_skips_exhausted_events(api_client, make_product, order_payload, monkeypatch):
    monkeypatch.setattr(outbox, "send_order_confirmation", _smtp_down)
    _place(api_client, make_product, order_payload)
    OutboxEvent.objects.update(attempts=5)

    assert outbox.dispatch_pending(max_attempts=5) == (0, 0)
    assert OutboxEvent.objects.get().attempts == 5


def test_unknown_event_type_is_marked_failed():
    event = OutboxEvent.objects.create(
        aggregate_type="Order", aggregate_id="x", event_type="Mystery", payload={},
    )

    assert outbox.dispatch_event(event) is False
    event.refresh_from_db()
    assert event.status == OutboxEvent.Status.FAILED
    assert "no handler" in event.last_error


def test_dispatch_goes_to_worker_unless_inline(settings, monkeypatch):
    submitted = []

    class FakeExecutor:
        def submit(self, fn, *args):
            submitted.append(args)

    settings.OUTBOX_DISPATCH_INLINE = False
    monkeypatch.setattr(outbox, "_executor", FakeExecutor())

    outbox.schedule_outbox_dispatch([7, 8])

    assert submitted == [([7, 8],)]


def test_order_without_email_writes_no_event(api_client, make_product, order_payload, mailoutbox):
    _place(api_client, make_product, order_payload, customerEmail="")

    assert OutboxEvent.objects.count() == 0
    assert mailoutbox == []
