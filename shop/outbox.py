"""
Transactional outbox for order side effects.

The event row is written inside the order transaction, so it exists exactly
when the order does. Delivery happens after commit, off the request path; a
failed delivery only marks the event and is retried by ``dispatch_outbox``.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

from django.conf import settings
from django.db import connections, transaction

from .models import Order, OutboxEvent
from .notifications import send_order_confirmation

logger = logging.getLogger(__name__)

EVENT_ORDER_PLACED = "OrderPlaced"

_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="outbox")


def record_order_placed(order: Order) -> OutboxEvent:
    # must run inside the order's atomic block
    event = OutboxEvent.objects.create(
        aggregate_type="Order",
        aggregate_id=str(order.pk),
        event_type=EVENT_ORDER_PLACED,
        payload={"order_id": str(order.pk), "order_number": order.order_number},
    )
    transaction.on_commit(lambda: schedule_outbox_dispatch([event.pk]), robust=True)
    return event


def schedule_outbox_dispatch(event_ids: list[int]) -> None:
    if settings.OUTBOX_DISPATCH_INLINE:
        _dispatch_ids(event_ids)
    else:
        _executor.submit(_dispatch_in_worker, list(event_ids))


def _dispatch_in_worker(event_ids: list[int]) -> None:
    try:
        _dispatch_ids(event_ids)
    except Exception:
        logger.exception(f"outbox worker crashed for events {event_ids}")
    finally:
        connections.close_all()


def _dispatch_ids(event_ids: list[int]) -> None:
    for event in OutboxEvent.objects.filter(pk__in=event_ids, status=OutboxEvent.Status.PENDING):
        dispatch_event(event)


def _handle_order_placed(event: OutboxEvent) -> None:
    order = Order.objects.prefetch_related("items__product").get(pk=event.payload["order_id"])
    send_order_confirmation(order)


HANDLERS = {
    EVENT_ORDER_PLACED: _handle_order_placed,
}


def dispatch_event(event: OutboxEvent) -> bool:
    """Deliver one event. Never raises for handler failures; returns success."""
    event.attempts += 1
    try:
        handler = HANDLERS.get(event.event_type)
        if handler is None:
            raise LookupError(f"no handler for event type {event.event_type!r}")
        handler(event)
    except Exception as exc:
        logger.exception(f"outbox dispatch failed: {event} (attempt {event.attempts})")
        event.status = OutboxEvent.Status.FAILED
        event.last_error = str(exc)[:2000]
        event.save(update_fields=["status", "attempts", "last_error", "updated_at"])
        return False

    event.status = OutboxEvent.Status.SENT
    event.last_error = ""
    event.save(update_fields=["status", "attempts", "last_error", "updated_at"])
    logger.info(f"outbox dispatched: {event}")
    return True


def dispatch_pending(*, limit: int = 100, max_attempts: int | None = None) -> tuple[int, int]:
    """Claim undelivered events (skipping rows another worker holds) and deliver them."""
    max_attempts = max_attempts or settings.OUTBOX_MAX_ATTEMPTS
    sent = failed = 0
    with transaction.atomic():
        rows = list(
            OutboxEvent.objects
            .select_for_update(skip_locked=True)
            .filter(
                status__in=[OutboxEvent.Status.PENDING, OutboxEvent.Status.FAILED],
                attempts__lt=max_attempts,
            )
            .order_by("created_at", "id")[:limit]
        )
        for event in rows:
            if dispatch_event(event):
                sent += 1
            else:
                failed += 1
    return sent, failed
