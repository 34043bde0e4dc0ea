from decimal import Decimal

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_openai import ChatOpenAI

from . import generation
from .generation import (
    generate_page_content,
    generate_seo_description,
    get_chat_model,
    seo_template,
    validate_seo_description,
)

pytestmark = pytest.mark.django_db(transaction=True)


class BrokenChatModel(FakeListChatModel):
    def _call(self, *args, **kwargs):
        raise ConnectionError("provider unreachable")


@pytest.fixture
def product(make_collection, make_product):
    return make_product(
        name="Paper Lawn Tarkashi", color="Lilac", price=Decimal("3800"), pieces="2 pc",
        collection=make_collection(name="Paper Lawn Tarkashi"),
    )


def test_no_api_key_means_no_model(settings):
    settings.OPENAI_API_KEY = ""
    assert get_chat_model() is None


def test_api_key_builds_openai_model(settings):
    settings.OPENAI_API_KEY = "sk-test"
    settings.OPENAI_MODEL = "gpt-4o-mini"

    llm = get_chat_model(max_tokens=150)

    assert isinstance(llm, ChatOpenAI)
    assert llm.model_name == "gpt-4o-mini"


def test_seo_uses_the_model_when_available(product):
    llm = FakeListChatModel(responses=["  Handcrafted lilac tarkashi lawn from Bahawalpur.  "])

    result = generate_seo_description(product, llm=llm)

    assert result == {"description": "Handcrafted lilac tarkashi lawn from Bahawalpur.", "generatedBy": "ai"}


@pytest.mark.parametrize("llm", [BrokenChatModel(responses=["unused"]), FakeListChatModel(responses=["   "])])
def test_seo_falls_back_to_template(product, llm):
    result = generate_seo_description(product, llm=llm)

    assert result == {"description": seo_template(product), "generatedBy": "template"}


def test_seo_template_is_stable_and_bounded(product):
    first = seo_template(product)

    assert first == seo_template(product)
    assert len(first) <= 160
    assert "Lilac" in first
    if len(first) == 160:
        assert first.endswith("...")


def test_long_template_is_truncated(make_product):
    p = make_product(name="Cotton Net Chicken Kaari Formal Edition", color="Pastel Yellow With Silver")

    text = seo_template(p)

    assert len(text) == 160
    assert text.endswith("...")


def test_validate_seo_description():
    assert validate_seo_description("  ") == {"valid": False, "error": "Description cannot be empty"}

    short = validate_seo_description("Nice dress")
    assert short["valid"] is True
    assert short["optimal"] is False
    assert len(short["warnings"]) == 2

    good = validate_seo_description("Handcrafted Bahawalpur embroidery " + "x" * 100)
    assert good["warnings"] == []
    assert good["optimal"] is True


def test_page_content_template_without_model():
    result = generate_page_content("about-mission")

    assert result["title"] == "Our Mission"
    assert result["generatedBy"] == "template"


def test_page_content_default_template_titles_the_key():
    assert generate_page_content("shipping-policy")["title"] == "Shipping Policy"


def test_page_content_from_model():
    text = "Heritage stitched by hand. " * 10
    result = generate_page_content("home-hero", {}, llm=FakeListChatModel(responses=[text]))

    assert result["generatedBy"] == "ai"
    assert result["title"] == "Heritage Crafted by Hand"
    assert result["content"] == text.strip()
    assert result["metaDescription"] == text.strip()[:160]


def test_page_content_never_raises():
    result = generate_page_content("about-story", llm=BrokenChatModel(responses=["unused"]))

    assert result["generatedBy"] == "template"
    assert result["title"] == "Our Story"


def test_generation_reads_model_from_settings(monkeypatch, product):
    monkeypatch.setattr(generation, "get_chat_model", lambda **kw: FakeListChatModel(responses=["From settings"]))

    assert generate_seo_description(product)["generatedBy"] == "ai"
