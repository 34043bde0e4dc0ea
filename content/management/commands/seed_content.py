from django.core.management.base import BaseCommand
from django.db import transaction

from content.models import PageContent, SiteSetting

SETTINGS = [
    ("business_name", "Zoey's", "Business Name", "general"),
    ("site_tagline", "Bahawalpur Heritage", "Site Tagline", "general"),
    ("footer_about", "Handcrafted embroidered masterpieces from the heart of Bahawalpur.", "Footer About Text",
     "general"),
    ("business_phone", "", "Business Phone", "contact"),
    ("business_email", "", "Business Email", "contact"),
    ("business_address", "Bahawalpur, Punjab, Pakistan", "Business Address", "contact"),
    ("social_facebook", "", "Facebook URL", "social"),
    ("social_instagram", "", "Instagram URL", "social"),
    ("contact_meta_description",
     "Custom orders, bulk purchases, and nationwide delivery across Pakistan.",
     "Contact Page Meta Description", "seo"),
]

PAGES = [
    {
        "page_key": "home",
        "title": "Home - Authentic Bahawalpur Embroidery",
        "content": {
            "heroTitle": "Handcrafted Bahawalpur Embroidery",
            "heroSubtitle": "Chicken kaari, pakka tanka and tarkashi embroidery crafted by master artisans.",
            "ctaText": "Browse Collections",
        },
        "meta_title": "Authentic Bahawalpur Embroidery & Handcrafted Pakistani Fabrics",
        "meta_description": "Shop handcrafted Bahawalpur embroidery delivered nationwide.",
        "keywords": "bahawalpur embroidery, chicken kaari, pakka tanka, tarkashi",
    },
    {
        "page_key": "about",
        "title": "Our Story - Heritage & Craftsmanship",
        "content": {
            "aboutText": "We work directly with master artisans, providing fair wages while keeping "
                         "traditional techniques alive.",
            "faqs": [
                {
                    "question": "What is Bahawalpur embroidery?",
                    "answer": "A traditional craft from the Punjab region, known for pakka tanka, tarkashi, "
                              "cut dana and chicken kaari.",
                },
            ],
        },
        "meta_title": "Our Story - Heritage & Craftsmanship",
        "meta_description": "Preserving centuries-old Bahawalpur embroidery techniques.",
        "keywords": "bahawalpur embroidery heritage, artisan support",
    },
    {
        "page_key": "contact",
        "title": "Contact Us",
        "content": {
            "introText": "Reach out for custom embroidery orders, wholesale inquiries, or any questions.",
            "faqs": [
                {
                    "question": "What payment methods do you accept?",
                    "answer": "We accept Cash on Delivery (COD) nationwide for retail orders.",
                },
                {
                    "question": "Do you ship internationally?",
                    "answer": "Currently we ship across Pakistan. Contact us about international orders.",
                },
            ],
        },
        "meta_title": "Contact Us",
        "meta_description": "Custom orders, bulk purchases, and nationwide delivery across Pakistan.",
        "keywords": "contact bahawalpur embroidery, custom embroidery orders",
    },
]


class Command(BaseCommand):
    help = "Create default page content and site settings. Existing keys are never overwritten."

    @transaction.atomic
    def handle(self, *args, **options):
        settings_created = 0
        for key, value, label, category in SETTINGS:
            _, created = SiteSetting.objects.get_or_create(
                key=key, defaults={"value": value, "label": label, "category": category},
            )
            settings_created += created

        pages_created = 0
        for page in PAGES:
            fields = dict(page)
            page_key = fields.pop("page_key")
            _, created = PageContent.objects.get_or_create(page_key=page_key, defaults=fields)
            pages_created += created

        self.stdout.write(f"content: {pages_created} new pages, {settings_created} new settings")
