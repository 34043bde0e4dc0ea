from io import StringIO

import pytest
from django.core.management import call_command

from .models import PageContent, SiteSetting

pytestmark = pytest.mark.django_db(transaction=True)


@pytest.fixture
def pages():
    about = PageContent.objects.create(
        page_key="about",
        title="Our Story",
        content={"aboutText": "Heritage", "faqs": [{"question": "What is tarkashi?", "answer": "Threadwork."}]},
        meta_title="Our Story",
    )
    draft = PageContent.objects.create(page_key="draft", title="Draft", published=False)
    return about, draft


def test_public_content_hides_unpublished(api_client, pages):
    listing = api_client.get("/api/content").json()["data"]

    assert [p["pageKey"] for p in listing] == ["about"]
    assert api_client.get("/api/content/about").json()["data"]["metaTitle"] == "Our Story"
    assert api_client.get("/api/content/draft").status_code == 404


def test_content_schema_includes_faqs(api_client, pages):
    data = api_client.get("/api/content/about/schema").json()["data"]

    types = [node["@type"] for node in data["@graph"]]
    assert types == ["LocalBusiness", "FAQPage"]
    assert data["@graph"][1]["mainEntity"][0]["name"] == "What is tarkashi?"


@pytest.mark.parametrize("content", [
    {"faqs": ["Do you ship?"]},
    {"faqs": "Do you ship?"},
    {"faqs": [{"question": "Do you ship?"}, "loose text"]},
    "plain text page",
])
def test_content_schema_tolerates_free_form_faqs(api_client, content):
    PageContent.objects.create(page_key="faq", title="FAQ", content=content)

    res = api_client.get("/api/content/faq/schema")

    assert res.status_code == 200
    assert [node["@type"] for node in res.json()["data"]["@graph"]] == ["LocalBusiness"]


def test_admin_content_crud(admin_api, pages):
    about, draft = pages

    assert len(admin_api.get("/api/admin/content").json()["data"]) == 2
    assert admin_api.get("/api/admin/content/draft").json()["data"]["published"] is False

    dup = admin_api.post("/api/admin/content", {"pageKey": "about", "title": "Again"}, format="json")
    assert dup.status_code == 400
    assert dup.json()["error"] == "Content with this page key already exists"
    about.refresh_from_db()
    assert about.title == "Our Story"

    created = admin_api.post(
        "/api/admin/content", {"pageKey": "shop", "title": "Shop", "content": {"pageTitle": "Shop"}}, format="json",
    )
    assert created.status_code == 201

    res = admin_api.patch(f"/api/admin/content/{draft.pk}", {"published": True}, format="json")
    assert res.json()["data"]["published"] is True
    assert admin_api.patch(f"/api/admin/content/{draft.pk}", {"pageKey": "about"}, format="json").status_code == 400

    assert admin_api.delete(f"/api/admin/content/{draft.pk}").status_code == 200
    assert sorted(PageContent.objects.values_list("page_key", flat=True)) == ["about", "shop"]


def test_admin_content_generate_does_not_persist(admin_api):
    res = admin_api.post("/api/admin/content/collection-intro/generate", {"collectionName": "Gota"}, format="json")

    data = res.json()["data"]
    assert res.status_code == 200
    assert data["pageKey"] == "collection-intro"
    assert data["title"] == "Gota"
    assert data["generatedBy"] == "template"
    assert not PageContent.objects.exists()


def test_settings_public_views(api_client):
    SiteSetting.objects.create(key="business_phone", value="+92 300", label="Phone", category="contact")

    body = api_client.get("/api/settings").json()

    assert body["data"] == {"business_phone": "+92 300"}
    assert body["all"][0]["category"] == "contact"
    assert api_client.get("/api/settings/business_phone").json() == {"success": True, "data": "+92 300"}
    assert api_client.get("/api/settings/missing").status_code == 404


def test_admin_settings_upsert(admin_api):
    first = admin_api.post("/api/admin/settings", {"key": "site_tagline", "value": "Heritage"}, format="json")
    second = admin_api.post(
        "/api/admin/settings", {"key": "site_tagline", "value": "Bahawalpur Heritage"}, format="json",
    )

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["message"] == "Setting updated"
    setting = SiteSetting.objects.get()
    assert setting.value == "Bahawalpur Heritage"
    assert setting.category == "general"

    res = admin_api.patch(f"/api/admin/settings/{setting.pk}", {"label": "Tagline"}, format="json")
    assert res.json()["data"]["label"] == "Tagline"
    assert admin_api.delete(f"/api/admin/settings/{setting.pk}").status_code == 200
    assert not SiteSetting.objects.exists()


def test_seed_commands_never_overwrite(make_collection):
    SiteSetting.objects.create(key="business_name", value="Custom Name")
    make_collection(name="Mine", slug="shalwar")

    call_command("seed_content", stdout=StringIO())
    call_command("seed_content", stdout=StringIO())
    call_command("seed_catalog", stdout=StringIO())
    call_command("seed_catalog", stdout=StringIO())

    from shop.models import Collection, Product

    assert SiteSetting.objects.get(key="business_name").value == "Custom Name"
    assert PageContent.objects.filter(page_key="home").count() == 1
    assert Collection.objects.get(slug="shalwar").name == "Mine"
    assert Product.objects.filter(slug="shalwar-white").count() == 1
    assert not Product.objects.filter(quantity__gt=0, stock_status="out_of_stock").exists()
