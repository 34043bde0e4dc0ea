import uuid
from decimal import Decimal

import pytest

from .models import Collection, Order, OrderStatus, Product, StockStatus
from .services import place_order

pytestmark = pytest.mark.django_db(transaction=True)


def _order(product, quantity=1):
    return place_order(
        customer={
            "customer_name": "Sana",
            "customer_phone": "0300",
            "customer_email": "",
            "delivery_address": "Street 1",
            "city": "Lahore",
        },
        items=[{"product_id": str(product.pk), "quantity": quantity}],
    )


# ---------------------------
# Gate
# ---------------------------
@pytest.mark.parametrize("headers", [{}, {"HTTP_X_ADMIN_PASSWORD": "wrong"}])
def test_admin_requires_the_shared_secret(api_client, headers):
    res = api_client.get("/api/admin/orders", **headers)

    assert res.status_code == 401
    assert res.json()["success"] is False
    assert res.json()["error"] == "Unauthorized"


def test_unset_secret_rejects_everyone(admin_api, settings):
    settings.ADMIN_PASSWORD = ""

    assert admin_api.get("/api/admin/stats").status_code == 401


def test_rejected_call_runs_no_handler(api_client, make_product):
    p = make_product()

    res = api_client.delete(f"/api/admin/products/{p.pk}")

    assert res.status_code == 401
    assert Product.objects.filter(pk=p.pk).exists()


# ---------------------------
# Orders
# ---------------------------
def test_order_list_filters_by_status(admin_api, make_product):
    p = make_product(quantity=5)
    first = _order(p)
    _order(p)
    Order.objects.filter(pk=first.pk).update(status=OrderStatus.CONFIRMED)

    res = admin_api.get("/api/admin/orders", {"status": "confirmed"})

    body = res.json()
    assert res.status_code == 200
    assert body["total"] == 1
    assert body["data"][0]["orderNumber"] == first.order_number


def test_order_detail_by_id(admin_api, make_product):
    order = _order(make_product())

    res = admin_api.get(f"/api/admin/orders/{order.pk}")

    assert res.status_code == 200
    assert res.json()["data"]["id"] == str(order.pk)
    assert admin_api.get("/api/admin/orders/not-a-uuid").status_code == 404


def test_status_follows_the_transition_graph(admin_api, make_product):
    order = _order(make_product())
    url = f"/api/admin/orders/{order.pk}/status"

    assert admin_api.patch(url, {"status": "confirmed"}, format="json").status_code == 200
    res = admin_api.patch(url, {"status": "delivered"}, format="json")
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "delivered"

    res = admin_api.patch(url, {"status": "pending"}, format="json")
    assert res.status_code == 400
    assert res.json()["code"] == "invalid_status_transition"
    order.refresh_from_db()
    assert order.status == OrderStatus.DELIVERED


def test_same_status_again_is_a_no_op(admin_api, make_product):
    order = _order(make_product())

    res = admin_api.patch(f"/api/admin/orders/{order.pk}/status", {"status": "pending"}, format="json")

    assert res.status_code == 200
    assert res.json()["data"]["status"] == "pending"


def test_unknown_status_is_a_validation_error(admin_api, make_product):
    order = _order(make_product())

    res = admin_api.patch(f"/api/admin/orders/{order.pk}/status", {"status": "shipped"}, format="json")

    assert res.status_code == 400
    assert res.json()["errors"] == [{"field": "status", "message": "Invalid status"}]


def test_cancel_does_not_restock(admin_api, make_product):
    p = make_product(quantity=2)
    order = _order(p, quantity=2)

    res = admin_api.patch(f"/api/admin/orders/{order.pk}/status", {"status": "cancelled"}, format="json")

    assert res.status_code == 200
    p.refresh_from_db()
    assert p.quantity == 0


def test_status_change_on_missing_order(admin_api):
    res = admin_api.patch(f"/api/admin/orders/{uuid.uuid4()}/status", {"status": "confirmed"}, format="json")

    assert res.status_code == 404


# ---------------------------
# Products
# ---------------------------
def test_create_product_derives_slug_and_stock_status(admin_api, make_collection):
    c = make_collection()
    payload = {"name": "Lawn Pakka Tanka", "color": "Peach on Peach", "price": "4800", "collectionId": str(c.pk)}

    res = admin_api.post("/api/admin/products", payload, format="json")

    assert res.status_code == 201
    data = res.json()["data"]
    assert data["slug"] == "lawn-pakka-tanka-peach-on-peach"
    assert data["pieces"] == "3 pc"
    assert data["quantity"] == 0
    assert data["stockStatus"] == "out_of_stock"
    assert data["collection"]["id"] == str(c.pk)


def test_create_product_validation(admin_api):
    res = admin_api.post("/api/admin/products", {"price": "-1"}, format="json")

    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert {"name", "color", "price", "collectionId"} <= fields


def test_duplicate_product_is_rejected(admin_api, make_product):
    p = make_product(name="Cut Dana", color="Maroon")
    payload = {"name": "Cut Dana", "color": "Maroon", "price": "10", "collectionId": str(p.collection_id)}

    res = admin_api.post("/api/admin/products", payload, format="json")

    assert res.status_code == 400
    assert res.json()["error"] == "A product with this name and color already exists"


def test_update_product_recomputes_slug_and_stock(admin_api, make_product):
    p = make_product(name="Gota", color="Red", quantity=0)

    res = admin_api.patch(
        f"/api/admin/products/{p.pk}", {"color": "Blue", "quantity": 4}, format="json",
    )

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["slug"] == "gota-blue"
    assert data["stockStatus"] == "in_stock"
    p.refresh_from_db()
    assert p.stock_status == StockStatus.IN_STOCK


def test_update_product_slug_conflict(admin_api, make_product):
    make_product(name="Gota", color="Blue")
    p = make_product(name="Gota", color="Red")

    res = admin_api.patch(f"/api/admin/products/{p.pk}", {"color": "Blue"}, format="json")

    assert res.status_code == 400
    assert res.json()["code"] == "duplicate"


def test_stock_status_cannot_be_set_directly(admin_api, make_product):
    p = make_product(quantity=3)

    admin_api.patch(f"/api/admin/products/{p.pk}", {"stockStatus": "out_of_stock"}, format="json")

    p.refresh_from_db()
    assert p.stock_status == StockStatus.IN_STOCK


def test_delete_product_blocked_by_orders(admin_api, make_product):
    sold = make_product(quantity=2)
    _order(sold)
    unsold = make_product()

    blocked = admin_api.delete(f"/api/admin/products/{sold.pk}")
    ok = admin_api.delete(f"/api/admin/products/{unsold.pk}")

    assert blocked.status_code == 400
    assert blocked.json()["code"] == "delete_blocked"
    assert ok.status_code == 200
    assert list(Product.objects.values_list("pk", flat=True)) == [sold.pk]


def test_admin_product_list_has_order_counts(admin_api, make_product):
    p = make_product(quantity=5)
    _order(p)
    _order(p)

    res = admin_api.get("/api/admin/products", {"collectionId": str(p.collection_id)})

    assert res.status_code == 200
    assert res.json()["data"][0]["orderCount"] == 2


def test_generate_seo_uses_template_without_key(admin_api, make_product):
    p = make_product(name="Cut Dana", color="Maroon", description=None)

    res = admin_api.post(f"/api/admin/products/{p.pk}/generate-seo", {"save": True}, format="json")

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["generatedBy"] == "template"
    assert len(data["description"]) <= 160
    assert data["validation"]["valid"] is True
    p.refresh_from_db()
    assert p.description == data["description"]


# ---------------------------
# Collections
# ---------------------------
def test_collection_crud(admin_api):
    res = admin_api.post("/api/admin/collections", {"name": "Ajrak", "slug": "ajrak", "order": 7}, format="json")
    assert res.status_code == 201
    cid = res.json()["data"]["id"]

    dup = admin_api.post("/api/admin/collections", {"name": "Other", "slug": "ajrak"}, format="json")
    assert dup.status_code == 400
    assert dup.json()["error"] == "A collection with this slug already exists"

    res = admin_api.patch(f"/api/admin/collections/{cid}", {"description": "Block printed"}, format="json")
    assert res.json()["data"]["description"] == "Block printed"

    listing = admin_api.get("/api/admin/collections").json()["data"]
    assert listing[0]["productCount"] == 0

    assert admin_api.delete(f"/api/admin/collections/{cid}").status_code == 200
    assert not Collection.objects.exists()


def test_delete_collection_blocked_by_products(admin_api, make_product):
    p = make_product()

    res = admin_api.delete(f"/api/admin/collections/{p.collection_id}")

    assert res.status_code == 400
    assert res.json()["error"] == "Cannot delete collection with products. Delete or reassign products first."


# ---------------------------
# Stats
# ---------------------------
def test_stats(admin_api, make_product):
    a = make_product(price=Decimal("1000.00"), quantity=4)
    make_product(quantity=0)
    first = _order(a)
    second = _order(a, quantity=2)
    _order(a)
    Order.objects.filter(pk=first.pk).update(status=OrderStatus.CONFIRMED)
    Order.objects.filter(pk=second.pk).update(status=OrderStatus.DELIVERED)

    data = admin_api.get("/api/admin/stats").json()["data"]

    assert data["products"] == {"total": 2, "inStock": 0, "outOfStock": 2}
    assert data["orders"] == {"total": 3, "pending": 1, "confirmed": 1}
    assert Decimal(str(data["revenue"]["total"])) == Decimal("3000.00")
    assert len(data["recentOrders"]) == 3
    assert "orderNumber" in data["recentOrders"][0]
