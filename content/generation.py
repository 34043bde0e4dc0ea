"""
Marketing copy helpers: SEO product descriptions and page content.

Each helper asks the configured chat model first and falls back to fixed
templates when no ``OPENAI_API_KEY`` is set, or when the call fails or
comes back empty. They never raise; results say which path produced them
through ``generatedBy``.
"""
import logging

from django.conf import settings
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

logger = logging.getLogger(__name__)

GENERATED_BY_AI = "ai"
GENERATED_BY_TEMPLATE = "template"

SEO_MAX_LENGTH = 160
SEO_MIN_LENGTH = 120
SEO_KEYWORDS = ("embroidery", "handcrafted", "traditional", "bahawalpur", "pakistani")


def get_chat_model(*, max_tokens: int = 500) -> BaseChatModel | None:
    if not settings.OPENAI_API_KEY:
        return None
    return ChatOpenAI(
        model=settings.OPENAI_MODEL,
        api_key=settings.OPENAI_API_KEY,
        temperature=0.7,
        max_tokens=max_tokens,
        timeout=settings.OPENAI_TIMEOUT,
        max_retries=2,
    )


def _ask(llm: BaseChatModel, system: str, prompt: str) -> str:
    response = llm.invoke([SystemMessage(content=system), HumanMessage(content=prompt)])
    text = response.content.strip() if isinstance(response.content, str) else ""
    if not text:
        raise ValueError("chat model returned no text")
    return text


def _price(amount) -> str:
    return f"PKR {amount:,.0f}"


# ---------------------------
# SEO descriptions
# ---------------------------
SEO_SYSTEM_PROMPT = (
    "You are an expert SEO copywriter specializing in e-commerce product descriptions "
    "for traditional Pakistani textiles and embroidery."
)


def _seo_prompt(product) -> str:
    collection = product.collection.name if product.collection else "Premium"
    lines = [
        "Create a compelling, SEO-optimized product description for an e-commerce website "
        "selling traditional Pakistani embroidered fabrics.",
        "",
        "Product Details:",
        f"- Name: {product.name}",
        f"- Color: {product.color}",
        f"- Price: {_price(product.price)}",
        f"- Pieces: {product.pieces}",
        f"- Collection: {collection}",
    ]
    if product.description:
        lines.append(f"- Current Description: {product.description}")
    lines += [
        "",
        "Requirements:",
        "- Length: 150-160 characters (ideal for meta descriptions)",
        "- Include relevant keywords: traditional embroidery, Bahawalpur, handcrafted, Pakistani fabric",
        "- Natural, engaging, conversion-focused language",
        "",
        "Generate only the description text, no additional commentary.",
    ]
    return "\n".join(lines)


def seo_template(product) -> str:
    """Deterministic description; the template is picked by the product name so it stays stable."""
    collection = product.collection.name if product.collection else "Premium Collection"
    color, name, pieces, price = product.color, product.name, product.pieces, _price(product.price)

    templates = [
        f"Exquisite {color} {name} from our {collection}. {pieces} of handcrafted Bahawalpur embroidery "
        f"at {price}. Traditional Pakistani artistry meets modern elegance.",
        f"Discover the beauty of {color} {name} - {pieces} of authentic Bahawalpur embroidery. "
        f"Part of our {collection}, priced at {price}. Premium handcrafted Pakistani fabric.",
        f"Premium {color} {name} featuring traditional Bahawalpur embroidery. {collection} piece "
        f"includes {pieces} at {price}. Handcrafted with care for authentic Pakistani heritage.",
        f"Elegant {color} {name} in {pieces} from {collection}. Traditional Pakistani embroidery "
        f"crafted in Bahawalpur style. Premium quality at {price}.",
        f"Authentic {color} {name} - {pieces} of handcrafted embroidery from our {collection}. "
        f"{price}. Experience the rich heritage of Bahawalpur traditional textiles.",
    ]
    text = templates[sum(ord(c) for c in name) % len(templates)]
    if len(text) > SEO_MAX_LENGTH:
        return text[:SEO_MAX_LENGTH - 3] + "..."
    return text


def generate_seo_description(product, *, llm: BaseChatModel | None = None) -> dict:
    llm = llm or get_chat_model(max_tokens=150)
    if llm is not None:
        try:
            return {
                "description": _ask(llm, SEO_SYSTEM_PROMPT, _seo_prompt(product)),
                "generatedBy": GENERATED_BY_AI,
            }
        except Exception:
            logger.warning(f"SEO generation failed for {product.slug}, using template", exc_info=True)
    else:
        logger.info("no OPENAI_API_KEY configured, using SEO template")
    return {"description": seo_template(product), "generatedBy": GENERATED_BY_TEMPLATE}


def validate_seo_description(description: str | None) -> dict:
    if not description or not description.strip():
        return {"valid": False, "error": "Description cannot be empty"}

    length = len(description)
    warnings = []
    if length < SEO_MIN_LENGTH:
        warnings.append("Description is shorter than recommended (120-160 characters)")
    elif length > SEO_MAX_LENGTH:
        warnings.append("Description exceeds recommended length (120-160 characters)")

    lowered = description.lower()
    has_keywords = any(k in lowered for k in SEO_KEYWORDS)
    if not has_keywords:
        warnings.append("Consider including relevant keywords (embroidery, handcrafted, traditional, etc.)")

    return {
        "valid": True,
        "length": length,
        "warnings": warnings,
        "optimal": SEO_MIN_LENGTH <= length <= SEO_MAX_LENGTH and has_keywords,
    }


# ---------------------------
# Page content
# ---------------------------
def _page_prompt(page_key: str, context: dict) -> tuple[str, str]:
    business = settings.BUSINESS_NAME
    collection = context.get("collectionName") or "embroidery"
    prompts = {
        "about-story": (
            "You are an expert copywriter specializing in heritage brands and traditional crafts.",
            f'Write a compelling "Our Story" section for {business}, a business preserving traditional '
            "Bahawalpur embroidery techniques. Cover how the business started, the heritage being "
            "preserved, the artisans and their skills, and the values behind it. "
            "Make it warm and authentic. Length: 200-300 words.",
        ),
        "about-mission": (
            "You are an expert copywriter for purpose-driven brands.",
            f"Write a mission statement for {business} focusing on preserving traditional Bahawalpur "
            "embroidery, supporting local artisans and quality craftsmanship. Length: 100-150 words.",
        ),
        "home-hero": (
            "You are an expert e-commerce copywriter.",
            f"Write a hero headline (5-8 words) and subheadline (15-25 words) for the {business} "
            "storefront. Focus on handmade quality, heritage and Pakistani embroidery.",
        ),
        "collection-intro": (
            "You are an expert in traditional crafts marketing.",
            f"Write an introduction for the {collection} collection highlighting the embroidery "
            "technique, its heritage and why customers should choose it. Length: 150-200 words.",
        ),
    }
    default = (
        "You are an expert copywriter for traditional crafts and heritage brands.",
        f"Write engaging content for the {page_key} section of an e-commerce website selling "
        f"traditional Bahawalpur embroidery. Make it authentic, warm, and conversion-focused. "
        f"{context.get('instructions') or ''}".strip(),
    )
    return prompts.get(page_key, default)


def page_template(page_key: str, context: dict) -> dict:
    business = settings.BUSINESS_NAME
    collection = context.get("collectionName")
    templates = {
        "about-story": {
            "title": "Our Story",
            "content": (
                f"{business} was born from a passion for preserving the tradition of Bahawalpur "
                "embroidery. For generations, artisans in the Punjab region have passed down pakka tanka, "
                "tarkashi, cut dana and chicken kaari work.\n\n"
                "We work directly with these artisans, paying fair wages so the techniques keep thriving. "
                "Every piece takes days of handwork and carries that heritage into modern wardrobes."
            ),
            "metaDescription": (
                f"Discover how {business} preserves centuries-old Bahawalpur embroidery, supporting "
                "skilled artisans and bringing traditional Pakistani craftsmanship to modern fashion."
            ),
        },
        "about-mission": {
            "title": "Our Mission",
            "content": (
                "Our mission is to preserve and celebrate traditional Bahawalpur embroidery while "
                "empowering the artisans who keep it alive.\n\n"
                "Every purchase supports fair, sustainable work for skilled craftspeople in Pakistan."
            ),
            "metaDescription": (
                f"{business}'s mission: preserving traditional Bahawalpur embroidery and supporting "
                "local artisans through authentic handcrafted textiles."
            ),
        },
        "home-hero": {
            "title": "Heritage Crafted by Hand",
            "content": (
                "Discover Exquisite Bahawalpur Embroidery\n\n"
                "Handcrafted with centuries-old techniques, each piece celebrates traditional Pakistani "
                "embroidery while empowering skilled artisans."
            ),
            "metaDescription": (
                "Shop authentic Bahawalpur embroidery - handcrafted Pakistani fabrics featuring "
                "traditional techniques. Nationwide delivery."
            ),
        },
        "collection-intro": {
            "title": collection or "Our Collections",
            "content": (
                f"Explore our {collection or 'exquisite'} collection, where each piece showcases the "
                "mastery of traditional Bahawalpur embroidery. Every item is handcrafted with attention "
                "to the finest details, from the first stitch to the final embellishment."
            ),
            "metaDescription": (
                f"Explore the {collection or 'latest'} collection of handcrafted Bahawalpur embroidery. "
                "Authentic Pakistani craftsmanship with traditional techniques."
            ),
        },
    }
    page = templates.get(page_key) or {
        "title": " ".join(w.capitalize() for w in page_key.split("-")),
        "content": (
            f"Welcome to {business}. We specialize in preserving traditional Bahawalpur embroidery "
            "while supporting skilled local artisans. Each piece is handcrafted with meticulous attention "
            "to detail."
        ),
        "metaDescription": (
            "Authentic Bahawalpur embroidery - handcrafted Pakistani textiles by skilled artisans."
        ),
    }
    return {**page, "generatedBy": GENERATED_BY_TEMPLATE}


def generate_page_content(page_key: str, context: dict | None = None, *, llm: BaseChatModel | None = None) -> dict:
    context = context or {}
    template = page_template(page_key, context)

    llm = llm or get_chat_model(max_tokens=500)
    if llm is None:
        return template

    system, prompt = _page_prompt(page_key, context)
    try:
        text = _ask(llm, system, prompt)
    except Exception:
        logger.warning(f"page content generation failed for {page_key}, using template", exc_info=True)
        return template
    return {
        "title": template["title"],
        "content": text,
        "metaDescription": text[:SEO_MAX_LENGTH],
        "generatedBy": GENERATED_BY_AI,
    }
