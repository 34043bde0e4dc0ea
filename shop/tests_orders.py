import re
import uuid
from decimal import Decimal

import pytest

from storefront.exceptions import _flatten_errors

from .models import Order, OrderItem, OutboxEvent, Product, StockStatus
from .services import update_product

pytestmark = pytest.mark.django_db(transaction=True)

ORDERS_URL = "/api/orders"


def _assert_nothing_written(product, quantity):
    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    product.refresh_from_db()
    assert product.quantity == quantity


def test_create_order_returns_hydrated_order(api_client, make_product, order_payload):
    p = make_product(price=Decimal("4800.00"), quantity=3)

    res = api_client.post(ORDERS_URL, order_payload((p, 2)), format="json")

    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "Order created successfully"
    data = body["data"]
    assert re.match(r"^ZOE-\d{8}-\d{4}$", data["orderNumber"])
    assert res["Location"] == f"/api/orders/{data['orderNumber']}"
    assert data["status"] == "pending"
    assert data["paymentMethod"] == "COD"
    assert Decimal(str(data["totalAmount"])) == Decimal("9600.00")
    item = data["items"][0]
    assert item["productId"] == str(p.pk)
    assert item["quantity"] == 2
    assert item["product"]["collection"]["slug"] == p.collection.slug

    p.refresh_from_db()
    assert p.quantity == 1
    assert p.stock_status == StockStatus.IN_STOCK


def test_total_is_computed_server_side(api_client, make_product, order_payload):
    a = make_product(price=Decimal("4800.00"), quantity=5)
    b = make_product(price=Decimal("2100.50"), quantity=5)
    payload = order_payload((a, 1), (b, 3), totalAmount=1)

    res = api_client.post(ORDERS_URL, payload, format="json")

    assert res.status_code == 201
    order = Order.objects.get()
    assert order.total_amount == Decimal("11101.50")
    assert order.total_amount == sum(i.price * i.quantity for i in order.items.all())


def test_last_unit_marks_product_out_of_stock(api_client, make_product, order_payload):
    p = make_product(quantity=1)

    res = api_client.post(ORDERS_URL, order_payload((p, 1)), format="json")

    assert res.status_code == 201
    p.refresh_from_db()
    assert p.quantity == 0
    assert p.stock_status == StockStatus.OUT_OF_STOCK


def test_empty_items_is_rejected_without_writes(api_client, make_product, order_payload):
    p = make_product(quantity=2)

    res = api_client.post(ORDERS_URL, order_payload(), format="json")

    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert {"field": "items", "message": "At least one item required"} in body["errors"]
    _assert_nothing_written(p, 2)


def test_field_errors_are_reported_by_path(api_client, make_product, order_payload):
    p = make_product()
    payload = order_payload((p, 1), (p, 0), customerName="   ", customerEmail="not-an-email")
    del payload["city"]

    res = api_client.post(ORDERS_URL, payload, format="json")

    assert res.status_code == 400
    errors = {e["field"]: e["message"] for e in res.json()["errors"]}
    assert errors["customerName"] == "Name is required"
    assert errors["customerEmail"] == "Invalid email"
    assert errors["city"] == "City is required"
    assert errors["items[1].quantity"] == "Valid quantity required"
    assert "items[0].quantity" not in errors


@pytest.mark.parametrize("items_detail", [
    {1: {"quantity": ["Valid quantity required"]}},
    [{}, {"quantity": ["Valid quantity required"]}],
])
def test_item_error_paths_use_index_brackets(items_detail):
    detail = {"items": items_detail, "city": ["City is required"]}

    fields = [e["field"] for e in _flatten_errors(detail)]

    assert fields == ["items[1].quantity", "city"]


def test_email_is_optional(api_client, make_product, order_payload):
    p = make_product()
    payload = order_payload((p, 1))
    del payload["customerEmail"]

    res = api_client.post(ORDERS_URL, payload, format="json")

    assert res.status_code == 201
    assert res.json()["data"]["customerEmail"] is None
    assert OutboxEvent.objects.count() == 0


def test_unknown_product_is_404_even_with_valid_items(api_client, make_product, order_payload):
    p = make_product(quantity=4)
    payload = order_payload((p, 1))
    missing = str(uuid.uuid4())
    payload["items"].append({"productId": missing, "quantity": 1})

    res = api_client.post(ORDERS_URL, payload, format="json")

    assert res.status_code == 404
    body = res.json()
    assert body["success"] is False
    assert body["error"] == f"Product not found: {missing}"
    assert body["productId"] == missing
    _assert_nothing_written(p, 4)


def test_malformed_product_id_is_404(api_client, make_product, order_payload):
    p = make_product()
    payload = order_payload((p, 1))
    payload["items"][0]["productId"] = "not-a-uuid"

    res = api_client.post(ORDERS_URL, payload, format="json")

    assert res.status_code == 404
    assert Order.objects.count() == 0


def test_out_of_stock_product(api_client, make_product, order_payload):
    p = make_product(name="Cut Dana", color="Maroon", quantity=0)

    res = api_client.post(ORDERS_URL, order_payload((p, 1)), format="json")

    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "out_of_stock"
    assert body["error"] == "Product out of stock: Cut Dana - Maroon"
    _assert_nothing_written(p, 0)


def test_insufficient_stock_reports_available(api_client, make_product, order_payload):
    p = make_product(name="Shalwar", color="White", quantity=2)

    res = api_client.post(ORDERS_URL, order_payload((p, 3)), format="json")

    assert res.status_code == 400
    body = res.json()
    assert body["code"] == "insufficient_stock"
    assert body["error"] == "Only 2 available for: Shalwar"
    assert body["available"] == 2
    _assert_nothing_written(p, 2)


def test_same_product_twice_cannot_exceed_stock(api_client, make_product, order_payload):
    p = make_product(quantity=2)

    res = api_client.post(ORDERS_URL, order_payload((p, 1), (p, 2)), format="json")

    assert res.status_code == 400
    assert res.json()["available"] == 1
    _assert_nothing_written(p, 2)


def test_second_order_for_last_unit_fails(api_client, make_product, order_payload):
    p = make_product(price=Decimal("4800.00"), quantity=1)

    first = api_client.post(ORDERS_URL, order_payload((p, 1)), format="json")
    second = api_client.post(ORDERS_URL, order_payload((p, 1)), format="json")

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["code"] == "out_of_stock"
    assert Order.objects.count() == 1
    assert OrderItem.objects.get().price == Decimal("4800.00")
    p.refresh_from_db()
    assert p.quantity == 0


def test_price_change_does_not_touch_placed_orders(api_client, make_product, order_payload):
    p = make_product(price=Decimal("4800.00"), quantity=5)
    res = api_client.post(ORDERS_URL, order_payload((p, 2)), format="json")
    number = res.json()["data"]["orderNumber"]

    update_product(product_id=p.pk, changes={"price": Decimal("5200.00")})

    order = Order.objects.get(order_number=number)
    assert order.total_amount == Decimal("9600.00")
    assert order.items.get().price == Decimal("4800.00")


def test_order_lookup_is_stable(api_client, make_product, order_payload):
    a = make_product(quantity=5)
    b = make_product(quantity=5)
    number = api_client.post(ORDERS_URL, order_payload((a, 1)), format="json").json()["data"]["orderNumber"]

    before = api_client.get(f"{ORDERS_URL}/{number}")
    api_client.post(ORDERS_URL, order_payload((b, 2)), format="json")
    after = api_client.get(f"{ORDERS_URL}/{number}")

    assert before.status_code == after.status_code == 200
    assert before.json() == after.json()


def test_unknown_order_number_is_404(api_client):
    res = api_client.get(f"{ORDERS_URL}/ZOE-20240101-0000")

    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Order not found", "code": "order_not_found"}


def test_stock_status_follows_quantity_on_save(make_product):
    p = make_product(quantity=0)
    assert p.stock_status == StockStatus.OUT_OF_STOCK

    p.quantity = 3
    p.stock_status = StockStatus.OUT_OF_STOCK
    p.save(update_fields=["quantity"])

    assert Product.objects.get(pk=p.pk).stock_status == StockStatus.IN_STOCK
