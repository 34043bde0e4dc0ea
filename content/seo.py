"""schema.org JSON-LD documents for the storefront pages."""
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

SCHEMA_CONTEXT = "https://schema.org"


def _url(path: str = "") -> str:
    return f"{settings.FRONTEND_URL}{path}"


def organization_schema() -> dict:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "LocalBusiness",
        "@id": _url("#organization"),
        "name": settings.BUSINESS_NAME,
        "url": _url(),
        "email": settings.BUSINESS_EMAIL or None,
        "telephone": settings.BUSINESS_WHATSAPP or None,
        "currenciesAccepted": "PKR",
        "paymentAccepted": "Cash, Cash on Delivery",
        "areaServed": {"@type": "Country", "name": "Pakistan"},
    }


def product_schema(product) -> dict:
    description = product.description or (
        f"Handcrafted {product.name} in {product.color} with traditional Bahawalpur embroidery. {product.pieces}"
    )
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "Product",
        "name": f"{product.name} - {product.color}",
        "description": description,
        "image": product.images or [],
        "sku": str(product.pk),
        "brand": {"@type": "Brand", "name": settings.BUSINESS_NAME},
        "offers": {
            "@type": "Offer",
            "url": _url(f"/product/{product.slug}"),
            "priceCurrency": "PKR",
            "price": product.price,
            "priceValidUntil": (timezone.now() + timedelta(days=90)).date().isoformat(),
            # quantity is authoritative, not stock_status
            "availability": (
                "https://schema.org/InStock" if product.quantity > 0 else "https://schema.org/OutOfStock"
            ),
            "itemCondition": "https://schema.org/NewCondition",
            "seller": {"@id": _url("#organization")},
        },
    }


def collection_schema(collection, products) -> dict:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "CollectionPage",
        "name": collection.name,
        "description": collection.description,
        "url": _url(f"/{collection.slug}"),
        "mainEntity": {
            "@type": "ItemList",
            "numberOfItems": len(products),
            "itemListElement": [
                {"@type": "ListItem", "position": i, "url": _url(f"/product/{p.slug}")}
                for i, p in enumerate(products, start=1)
            ],
        },
    }


def breadcrumb_schema(crumbs: list[tuple[str, str]]) -> dict:
    """crumbs = [(name, path), ...] from the home page down."""
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "BreadcrumbList",
        "itemListElement": [
            {"@type": "ListItem", "position": i, "name": name, "item": _url(path)}
            for i, (name, path) in enumerate(crumbs, start=1)
        ],
    }


def faq_schema(faqs: list[dict]) -> dict:
    return {
        "@context": SCHEMA_CONTEXT,
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": faq["question"],
                "acceptedAnswer": {"@type": "Answer", "text": faq["answer"]},
            }
            for faq in faqs
            if isinstance(faq, dict) and faq.get("question") and faq.get("answer")
        ],
    }


def graph(*schemas: dict) -> dict:
    """Combine several documents into one ``@graph`` block."""
    nodes = []
    for schema in schemas:
        node = dict(schema)
        node.pop("@context", None)
        nodes.append(node)
    return {"@context": SCHEMA_CONTEXT, "@graph": nodes}
