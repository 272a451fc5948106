# products/tests/test_catalog.py

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase

from products.services.catalog import (
    CATALOG_CACHE_KEY,
    ProductNotFoundError,
    create_product,
    delete_product,
    fetch_products,
    filter_products,
    get_catalog_snapshot,
    get_products_by_ids,
    list_categories,
    update_product,
)
from sales.tests.fakes import FakeRecordStore

CATALOG = [
    {"id": 1, "name": "Bakso", "category": "Topping"},
    {"id": 2, "name": "Es Teh Manis", "category": "Minuman"},
    {"id": 3, "name": "Seblak Original", "category": "Seblak"},
    {"id": 4, "name": "Teh Tarik", "category": "Minuman"},
    {"id": 5, "name": "Pulsa 10k", "category": ""},
]


class CatalogFilterTests(SimpleTestCase):
    def test_search_is_case_insensitive_substring(self):
        names = [p["name"] for p in filter_products(CATALOG, search="TEH")]
        self.assertEqual(names, ["Es Teh Manis", "Teh Tarik"])

    def test_category_filter(self):
        names = [p["name"] for p in filter_products(CATALOG, category="Minuman")]
        self.assertEqual(names, ["Es Teh Manis", "Teh Tarik"])

    def test_all_means_no_category_filter(self):
        self.assertEqual(filter_products(CATALOG, category="All"), CATALOG)

    def test_search_and_category_combine(self):
        names = [p["name"] for p in filter_products(CATALOG, search="tarik", category="Minuman")]
        self.assertEqual(names, ["Teh Tarik"])

    def test_categories_all_first_then_first_seen(self):
        self.assertEqual(list_categories(CATALOG), ["All", "Topping", "Minuman", "Seblak"])


class CatalogServiceTests(TestCase):
    """
    GUARANTEES:
    - Reads go through the record store, ordered by name
    - Every inventory write invalidates the catalog snapshot
    """

    def setUp(self):
        cache.clear()
        self.store = FakeRecordStore()
        self.crackers = self.store.seed_product(name="Kerupuk", price=2000, stock=10, category="Topping")
        self.noodles = self.store.seed_product(name="Bakso", price=3000, stock=5, category="Topping")

    def test_fetch_products_ordered_by_name(self):
        names = [p["name"] for p in fetch_products(store=self.store)]
        self.assertEqual(names, ["Bakso", "Kerupuk"])

    def test_get_products_by_ids(self):
        found = get_products_by_ids([self.crackers["id"], 999], store=self.store)
        self.assertEqual(list(found), [self.crackers["id"]])

    def test_get_products_by_ids_empty_skips_store(self):
        self.assertEqual(get_products_by_ids([], store=self.store), {})
        self.assertEqual(self.store.call_count(), 0)

    def test_snapshot_is_cached_until_write(self):
        get_catalog_snapshot(store=self.store)
        get_catalog_snapshot(store=self.store)
        self.assertEqual(self.store.call_count("select"), 1)

        create_product(data={"name": "Sosis", "price": 3000, "stock": 8}, store=self.store)
        self.assertIsNone(cache.get(CATALOG_CACHE_KEY))

        names = [p["name"] for p in get_catalog_snapshot(store=self.store)]
        self.assertEqual(names, ["Bakso", "Kerupuk", "Sosis"])

    def test_update_product(self):
        row = update_product(self.crackers["id"], data={"price": 2500, "id": 77}, store=self.store)

        self.assertEqual(row["price"], 2500)
        self.assertEqual(row["id"], self.crackers["id"])

    def test_update_missing_product(self):
        with self.assertRaises(ProductNotFoundError):
            update_product(999, data={"price": 1}, store=self.store)

    def test_delete_product(self):
        delete_product(self.crackers["id"], store=self.store)
        self.assertEqual([p["name"] for p in fetch_products(store=self.store)], ["Bakso"])

        with self.assertRaises(ProductNotFoundError):
            delete_product(self.crackers["id"], store=self.store)
