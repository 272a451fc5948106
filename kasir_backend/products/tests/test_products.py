# products/tests/test_products.py

from django.core.exceptions import ValidationError
from django.test import TestCase

from products.models import Product


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - Products can be created safely
    - Pricing is sane
    - stock = -1 means unlimited
    """

    def test_product_creation(self):
        """A valid product should be created successfully."""
        product = Product.objects.create(name="  Seblak Ceker ", category=" Seblak ", price=18000)

        self.assertEqual(product.name, "Seblak Ceker")
        self.assertEqual(product.category, "Seblak")

    def test_default_stock_is_unlimited(self):
        product = Product.objects.create(name="Pulsa 10k", price=12000)

        self.assertEqual(product.stock, -1)
        self.assertTrue(product.is_unlimited)

    def test_name_is_required(self):
        with self.assertRaises(ValidationError):
            Product.objects.create(name="   ", price=1000)

    def test_product_price_is_non_negative(self):
        """Selling price must never be negative."""
        with self.assertRaises(ValidationError):
            Product.objects.create(name="Kerupuk", price=-1)

    def test_catalog_is_ordered_by_name(self):
        Product.objects.create(name="Sosis", price=3000)
        Product.objects.create(name="Bakso", price=3000)

        self.assertEqual(list(Product.objects.values_list("name", flat=True)), ["Bakso", "Sosis"])

    def test_product_string_representation(self):
        """__str__ should be human readable."""
        product = Product.objects.create(name="Es Teh", category="Minuman", price=5000, stock=12)

        self.assertIn("Es Teh", str(product))
        self.assertIn("12", str(product))
