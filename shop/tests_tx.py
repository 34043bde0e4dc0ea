import threading
from decimal import Decimal

import pytest
from django.db import IntegrityError, OperationalError, connection

from storefront.exceptions import InsufficientStockError, OutOfStockError

from . import services
from .models import Order, OrderItem, OutboxEvent, Product, StockStatus
from .tx_retry import is_retryable, retry_on_tx_failure

pytestmark = pytest.mark.django_db(transaction=True)

CUSTOMER = {
    "customer_name": "Ayesha Khan",
    "customer_phone": "+92 300 1234567",
    "customer_email": "ayesha@example.com",
    "delivery_address": "House 12, Model Town",
    "city": "Bahawalpur",
    "notes": None,
}


def _items(*pairs):
    return [{"product_id": str(p.pk), "quantity": q} for p, q in pairs]


def test_failed_decrement_rolls_back_every_item(make_product, monkeypatch):
    a = make_product(quantity=5)
    b = make_product(quantity=5)
    real_decrement = services.decrement_stock

    def flaky_decrement(product_id, quantity):
        if product_id == b.pk:
            raise InsufficientStockError(b, available=0)
        real_decrement(product_id, quantity)

    monkeypatch.setattr(services, "decrement_stock", flaky_decrement)

    with pytest.raises(InsufficientStockError):
        services.place_order(customer=CUSTOMER, items=_items((a, 2), (b, 1)))

    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    assert OutboxEvent.objects.count() == 0
    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.quantity, b.quantity) == (5, 5)


def test_order_number_collision_draws_a_new_number(make_product, monkeypatch):
    p = make_product(quantity=2)
    Order.objects.create(order_number="ZOE-20240101-1111", total_amount=Decimal("1"), **CUSTOMER)
    numbers = iter(["ZOE-20240101-1111", "ZOE-20240101-2222"])
    monkeypatch.setattr(services, "generate_order_number", lambda now=None: next(numbers))

    order = services.place_order(customer=CUSTOMER, items=_items((p, 1)))

    assert order.order_number == "ZOE-20240101-2222"
    assert order.items.count() == 1


def test_order_number_retries_are_bounded(make_product, monkeypatch, settings):
    settings.ORDER_NUMBER_ATTEMPTS = 3
    p = make_product(quantity=2)
    Order.objects.create(order_number="ZOE-20240101-1111", total_amount=Decimal("1"), **CUSTOMER)
    calls = []

    def always_taken(now=None):
        calls.append(1)
        return "ZOE-20240101-1111"

    monkeypatch.setattr(services, "generate_order_number", always_taken)

    with pytest.raises(IntegrityError):
        services.place_order(customer=CUSTOMER, items=_items((p, 1)))

    assert len(calls) == 3
    assert Order.objects.count() == 1
    p.refresh_from_db()
    assert p.quantity == 2


def test_decrement_never_goes_below_zero(make_product):
    p = make_product(quantity=2)

    with pytest.raises(InsufficientStockError) as exc_info:
        services.decrement_stock(p.pk, 3)
    assert exc_info.value.available == 2

    services.decrement_stock(p.pk, 2)
    p.refresh_from_db()
    assert p.quantity == 0
    assert p.stock_status == StockStatus.OUT_OF_STOCK


def test_decrement_keeps_in_stock_when_units_remain(make_product):
    p = make_product(quantity=3)

    services.decrement_stock(p.pk, 1)

    p.refresh_from_db()
    assert p.quantity == 2
    assert p.stock_status == StockStatus.IN_STOCK


def test_stock_drained_after_read_is_caught_by_conditional_update(make_product, monkeypatch):
    p = make_product(quantity=1)
    real_decrement = services.decrement_stock

    def racing_decrement(product_id, quantity):
        # another order takes the last unit between the stock check and the write
        Product.objects.filter(pk=product_id).update(quantity=0)
        real_decrement(product_id, quantity)

    monkeypatch.setattr(services, "decrement_stock", racing_decrement)

    with pytest.raises(InsufficientStockError) as exc_info:
        services.place_order(customer=CUSTOMER, items=_items((p, 1)))

    assert exc_info.value.available == 0
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    p.refresh_from_db()
    assert p.quantity == 1


@pytest.mark.skipif(connection.vendor != "postgresql", reason="needs real row locks")
def test_concurrent_orders_never_oversell(make_product):
    p = make_product(quantity=3)
    results = []
    lock = threading.Lock()

    def place():
        try:
            services.place_order(customer=CUSTOMER, items=_items((p, 1)))
            outcome = "ok"
        except (InsufficientStockError, OutOfStockError):
            outcome = "rejected"
        finally:
            connection.close()
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=place) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 3
    assert results.count("rejected") == 5
    p.refresh_from_db()
    assert p.quantity == 0
    assert OrderItem.objects.filter(product=p).count() == 3


def test_is_retryable():
    class SerializationFailure(Exception):
        pgcode = "40001"

    assert is_retryable(SerializationFailure())
    assert is_retryable(OperationalError("database is locked"))
    assert is_retryable(Exception("deadlock detected"))
    assert not is_retryable(ValueError("boom"))


def test_retry_on_tx_failure_retries_then_gives_up():
    calls = []

    @retry_on_tx_failure(max_attempts=3, backoff=0)
    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise OperationalError("database is locked")
        return "done"

    assert flaky() == "done"
    assert len(calls) == 3

    @retry_on_tx_failure(max_attempts=2, backoff=0)
    def broken():
        calls.append(1)
        raise OperationalError("database is locked")

    calls.clear()
    with pytest.raises(OperationalError):
        broken()
    assert len(calls) == 2


def test_non_retryable_errors_propagate_immediately():
    calls = []

    @retry_on_tx_failure(max_attempts=5, backoff=0)
    def bad():
        calls.append(1)
        raise ValueError("nope")

    with pytest.raises(ValueError):
        bad()
    assert calls == [1]
