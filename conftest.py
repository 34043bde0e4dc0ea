import itertools
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

ADMIN_SECRET = "test-admin-secret"

_seq = itertools.count(1)


@pytest.fixture(autouse=True)
def shop_settings(settings):
    settings.ADMIN_PASSWORD = ADMIN_SECRET
    settings.BUSINESS_EMAIL = "owner@example.com"
    settings.OUTBOX_DISPATCH_INLINE = True
    settings.OPENAI_API_KEY = ""
    return settings


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_api():
    client = APIClient()
    client.credentials(HTTP_X_ADMIN_PASSWORD=ADMIN_SECRET)
    return client


@pytest.fixture
def make_collection():
    from shop.models import Collection

    def _make(**kwargs):
        n = next(_seq)
        kwargs.setdefault("name", f"Collection {n}")
        kwargs.setdefault("slug", f"collection-{n}")
        return Collection.objects.create(**kwargs)
    return _make


@pytest.fixture
def make_product(make_collection):
    from shop.models import Product

    def _make(**kwargs):
        n = next(_seq)
        if "collection" not in kwargs:
            kwargs["collection"] = make_collection()
        kwargs.setdefault("name", f"Lawn Suit {n}")
        kwargs.setdefault("color", "Peach")
        kwargs.setdefault("price", Decimal("4800.00"))
        kwargs.setdefault("quantity", 5)
        return Product.objects.create(**kwargs)
    return _make


@pytest.fixture
def order_payload():
    def _payload(*items, **overrides):
        body = {
            "customerName": "Ayesha Khan",
            "customerPhone": "+92 300 1234567",
            "customerEmail": "ayesha@example.com",
            "deliveryAddress": "House 12, Model Town",
            "city": "Bahawalpur",
            "items": [{"productId": str(p.pk), "quantity": q} for p, q in items],
        }
        body.update(overrides)
        return body
    return _payload
