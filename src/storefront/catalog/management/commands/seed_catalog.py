from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from storefront.catalog.models import Category, Product, Province

PROVINCES = [
    ("AB", "Alberta"),
    ("BC", "British Columbia"),
    ("MB", "Manitoba"),
    ("NB", "New Brunswick"),
    ("NL", "Newfoundland and Labrador"),
    ("NS", "Nova Scotia"),
    ("NT", "Northwest Territories"),
    ("NU", "Nunavut"),
    ("ON", "Ontario"),
    ("PE", "Prince Edward Island"),
    ("QC", "Quebec"),
    ("SK", "Saskatchewan"),
    ("YT", "Yukon"),
]

CATEGORIES = [
    ("Food", "Pantry staples and treats from across the country"),
    ("Apparel", "Clothing built for Canadian winters"),
    ("Home", "Things that make a cabin feel like home"),
]

# sku, name, price, category, emoji, stock, origin
PRODUCTS = [
    ("MPL-001", "Canadian Maple Syrup", "24.99", "Food", "🍁", 45, "Quebec"),
    ("HKY-001", "Hockey Jersey", "89.99", "Apparel", "🏒", 23, "Ontario"),
    ("COF-001", "Artisan Coffee Beans", "18.99", "Food", "☕", 67, "British Columbia"),
    ("TOQ-001", "Wool Toque", "34.99", "Apparel", "🧢", 89, "Alberta"),
    ("JAM-001", "Wild Blueberry Jam", "12.99", "Food", "🫐", 34, "Nova Scotia"),
    ("CND-001", "Cedar Candle", "28.99", "Home", "🕯️", 56, "British Columbia"),
    ("FLN-001", "Flannel Shirt", "64.99", "Apparel", "👔", 41, "Ontario"),
    ("WIN-001", "Ice Wine", "54.99", "Food", "🍷", 18, "Ontario"),
]


class Command(BaseCommand):
    help = "Load the demo catalog (provinces, categories and products). Safe to run twice."

    @transaction.atomic
    def handle(self, *args, **options):
        provinces = {}
        for code, name in PROVINCES:
            provinces[name], _ = Province.objects.update_or_create(code=code, defaults={"name": name})

        categories = {}
        for order, (name, description) in enumerate(CATEGORIES, start=1):
            categories[name], _ = Category.objects.update_or_create(
                name=name, defaults={"description": description, "display_order": order}
            )

        created = 0
        for sku, name, price, category, emoji, stock, origin in PRODUCTS:
            _, was_created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "price": Decimal(price),
                    "category": categories[category],
                    "image_emoji": emoji,
                    "stock_quantity": stock,
                    "origin_province": provinces[origin],
                },
            )
            created += was_created

        self.stdout.write(self.style.SUCCESS(f"Catalog seeded ({created} new products)"))
