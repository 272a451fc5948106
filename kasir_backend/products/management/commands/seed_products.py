from django.core.management.base import BaseCommand

from datastore.base import UNLIMITED_STOCK
from products.models import Product
from products.services.catalog import invalidate_catalog_snapshot


class Command(BaseCommand):
    help = "Seed the counter catalog (menu items, toppings, drinks, services)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete every product before seeding",
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products..."))

        if options["reset"]:
            Product.objects.all().delete()

        # -------------------------------
        # PRODUCTS (name, category, price, stock)
        # stock -1 = never depleted (made to order / service)
        # -------------------------------
        products_data = [
            ("Seblak Original", "Seblak", 15000, UNLIMITED_STOCK),
            ("Seblak Ceker", "Seblak", 18000, UNLIMITED_STOCK),
            ("Seblak Seafood", "Seblak", 22000, UNLIMITED_STOCK),
            ("Kerupuk", "Topping", 2000, 100),
            ("Sosis", "Topping", 3000, 60),
            ("Bakso", "Topping", 3000, 60),
            ("Es Teh Manis", "Minuman", 5000, UNLIMITED_STOCK),
            ("Air Mineral", "Minuman", 4000, 48),
            ("Keripik Pedas", "Snack", 7000, 25),
            ("Pulsa 10k", "Pulsa", 12000, UNLIMITED_STOCK),
        ]

        created_count = 0
        for name, category, price, stock in products_data:
            _, created = Product.objects.get_or_create(
                name=name,
                defaults={"category": category, "price": price, "stock": stock},
            )
            created_count += int(created)

        invalidate_catalog_snapshot()

        self.stdout.write(
            self.style.SUCCESS(f"Products seeded ({created_count} new).")
        )
