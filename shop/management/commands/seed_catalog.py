from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from shop.models import Collection, Product, product_slug

COLLECTIONS = [
    ("Lawn Pakka Tanka", "lawn-pakka-tanka",
     "Allover shadow work with motifs on sleeves and back, and motifs on dupatta.", 1),
    ("Cut Dana", "cut-dana",
     "Lawn outfits with tarkashi gala and panel design in mirror work and phulkari embroidery.", 2),
    ("Paper Lawn Tarkashi", "paper-lawn-tarkashi",
     "Paper lawn with intricate tarkashi gala and hand embroidery adorned with pearls and silver sequence.", 3),
    ("Cotton Net Chicken Kaari", "cotton-net-chicken-kaari",
     "Cotton net with chicken kaari hand embroidery adorned with pearls and silver sequence.", 4),
    ("Shalwar", "shalwar", "Shadow work chikankari trousers with elegant embroidery.", 5),
]

# (name, color, price, pieces, quantity, collection slug)
PRODUCTS = [
    ("Lawn Pakka Tanka", "Peach on Peach", "4800", "3 pc", 1, "lawn-pakka-tanka"),
    ("Lawn Pakka Tanka", "Green on Green", "4800", "3 pc", 1, "lawn-pakka-tanka"),
    ("Lawn Pakka Tanka", "Lemon on Lemon", "4800", "3 pc", 2, "lawn-pakka-tanka"),
    ("Cut Dana", "Maroon", "5500", "3 pc", 1, "cut-dana"),
    ("Paper Lawn Tarkashi", "Orange", "3800", "2 pc", 1, "paper-lawn-tarkashi"),
    ("Paper Lawn Tarkashi", "Lilac", "3800", "2 pc", 1, "paper-lawn-tarkashi"),
    ("Cotton Net Chicken Kaari", "Baby Pink", "6500", "2 pc", 1, "cotton-net-chicken-kaari"),
    ("Cotton Net Chicken Kaari", "Apple Green", "6800", "2 pc", 0, "cotton-net-chicken-kaari"),
    ("Shalwar", "White", "2100", "1 pc", 3, "shalwar"),
]


class Command(BaseCommand):
    help = "Create the sample collections and products. Existing rows are left untouched."

    @transaction.atomic
    def handle(self, *args, **options):
        collections = {}
        for name, slug, description, order in COLLECTIONS:
            collections[slug], _ = Collection.objects.get_or_create(
                slug=slug, defaults={"name": name, "description": description, "order": order},
            )

        created = 0
        for name, color, price, pieces, quantity, collection in PRODUCTS:
            _, was_created = Product.objects.get_or_create(
                slug=product_slug(name, color),
                defaults={
                    "name": name,
                    "color": color,
                    "price": Decimal(price),
                    "pieces": pieces,
                    "quantity": quantity,
                    "collection": collections[collection],
                    "description": collections[collection].description,
                },
            )
            created += was_created

        self.stdout.write(f"catalog: {len(collections)} collections, {created} new products")
