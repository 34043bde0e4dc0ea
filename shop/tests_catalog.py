from decimal import Decimal

import pytest

pytestmark = pytest.mark.django_db(transaction=True)


@pytest.fixture
def catalog(make_collection, make_product):
    lawn = make_collection(name="Lawn", slug="lawn", order=2)
    net = make_collection(name="Cotton Net", slug="cotton-net", order=1)
    products = {
        "peach": make_product(name="Lawn Suit", color="Peach", price=Decimal("4800"), quantity=2, collection=lawn),
        "green": make_product(name="Lawn Suit", color="Green", price=Decimal("3800"), quantity=0, collection=lawn,
                              description="Shadow work with mirror motifs"),
        "pink": make_product(name="Chicken Kaari", color="Baby Pink", price=Decimal("6500"), quantity=1,
                             collection=net),
    }
    return {"lawn": lawn, "net": net, **products}


def _slugs(res):
    return sorted(p["slug"] for p in res.json()["data"])


def test_product_list_filters(api_client, catalog):
    assert _slugs(api_client.get("/api/products", {"collection": "lawn"})) == ["lawn-suit-green", "lawn-suit-peach"]
    assert _slugs(api_client.get("/api/products", {"minPrice": "4000", "maxPrice": "5000"})) == ["lawn-suit-peach"]
    assert _slugs(api_client.get("/api/products", {"stockStatus": "out_of_stock"})) == ["lawn-suit-green"]
    assert _slugs(api_client.get("/api/products", {"search": "PINK"})) == ["chicken-kaari-baby-pink"]
    assert _slugs(api_client.get("/api/products", {"search": "mirror"})) == ["lawn-suit-green"]


def test_product_list_pagination(api_client, catalog):
    res = api_client.get("/api/products", {"limit": 2, "offset": 0})
    rest = api_client.get("/api/products", {"limit": 2, "offset": 2})

    assert res.json()["count"] == 2
    assert res.json()["total"] == 3
    assert rest.json()["count"] == 1
    seen = {p["id"] for p in res.json()["data"]} | {p["id"] for p in rest.json()["data"]}
    assert len(seen) == 3


def test_bad_query_params_are_rejected(api_client, catalog):
    res = api_client.get("/api/products", {"minPrice": "cheap", "limit": 0})

    assert res.status_code == 400
    assert {e["field"] for e in res.json()["errors"]} == {"minPrice", "limit"}


def test_empty_query_values_are_ignored(api_client, catalog):
    res = api_client.get("/api/products", {"collection": "", "search": ""})

    assert res.json()["total"] == 3


def test_product_detail_and_schema(api_client, catalog):
    res = api_client.get("/api/products/lawn-suit-peach")
    schema = api_client.get("/api/products/lawn-suit-green/schema").json()["data"]

    assert res.json()["data"]["collection"]["slug"] == "lawn"
    assert schema["@type"] == "Product"
    assert schema["offers"]["availability"] == "https://schema.org/OutOfStock"
    assert api_client.get("/api/products/nope").status_code == 404


def test_products_by_collection(api_client, catalog):
    res = api_client.get("/api/products/collection/cotton-net")

    assert res.json()["count"] == 1
    assert res.json()["data"][0]["color"] == "Baby Pink"


def test_collections_are_ranked_with_counts(api_client, catalog):
    data = api_client.get("/api/collections").json()["data"]

    assert [c["slug"] for c in data] == ["cotton-net", "lawn"]
    assert [c["productCount"] for c in data] == [1, 2]


def test_collection_detail_lists_only_in_stock(api_client, catalog):
    res = api_client.get("/api/collections/lawn")

    assert res.status_code == 200
    assert [p["slug"] for p in res.json()["data"]["products"]] == ["lawn-suit-peach"]
    assert api_client.get("/api/collections/missing").json()["error"] == "Collection not found"


def test_collection_schema(api_client, catalog):
    data = api_client.get("/api/collections/lawn/schema").json()["data"]

    page, crumbs = data["@graph"]
    assert page["@type"] == "CollectionPage"
    assert page["mainEntity"]["numberOfItems"] == 1
    assert crumbs["itemListElement"][-1]["name"] == "Lawn"


def test_health(api_client):
    res = api_client.get("/api/health")

    assert res.status_code == 200
    assert res.json()["status"] == "ok"
