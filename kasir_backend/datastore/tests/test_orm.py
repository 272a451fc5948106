# datastore/tests/test_orm.py

from django.test import TestCase

from datastore.exceptions import ConstraintViolation
from datastore.notifications import ChangeHub
from datastore.orm import OrmRecordStore
from products.models import Product


class OrmRecordStoreTests(TestCase):
    """
    GUARANTEES:
    - Rows are plain dicts with store-assigned ids
    - Stock decrements are relative and skip unlimited products
    - Sale tables are append-only
    - Change notifications are delivered after commit
    """

    def setUp(self):
        self.hub = ChangeHub()
        self.store = OrmRecordStore(change_hub=self.hub)

    def test_insert_and_select(self):
        row = self.store.insert("products", {"name": "Seblak", "category": "Seblak", "price": 15000})

        self.assertIsNotNone(row["id"])
        self.assertEqual(row["stock"], -1)

        rows = self.store.select("products", {"id__in": [row["id"]]}, columns=("id", "name"))
        self.assertEqual(rows, [{"id": row["id"], "name": "Seblak"}])

    def test_select_order_and_limit(self):
        for name in ("Sosis", "Bakso", "Kerupuk"):
            self.store.insert("products", {"name": name, "price": 1000})

        rows = self.store.select("products", order="-name", limit=2, columns=("name",))
        self.assertEqual([r["name"] for r in rows], ["Sosis", "Kerupuk"])

    def test_invalid_row_is_constraint_violation(self):
        with self.assertRaises(ConstraintViolation):
            self.store.insert("products", {"name": "", "price": 1000})

    def test_update_and_delete(self):
        row = self.store.insert("products", {"name": "Bakso", "price": 3000, "stock": 4})

        self.assertEqual(self.store.update("products", {"id": row["id"]}, {"price": 3500}), 1)
        self.assertEqual(Product.objects.get(pk=row["id"]).price, 3500)

        self.assertEqual(self.store.delete("products", {"id": row["id"]}), 1)
        self.assertEqual(self.store.delete("products", {"id": row["id"]}), 0)

    def test_sale_tables_are_append_only(self):
        with self.assertRaises(ConstraintViolation):
            self.store.update("transactions", {"id": 1}, {"total_amount": 0})
        with self.assertRaises(ConstraintViolation):
            self.store.delete("transaction_items", {"id": 1})

    def test_decrement_stock_is_relative(self):
        product = Product.objects.create(name="Kerupuk", price=2000, stock=10)

        self.assertEqual(self.store.decrement_stock(product.id, 3), 1)
        self.assertEqual(self.store.decrement_stock(product.id, 3), 1)

        product.refresh_from_db()
        self.assertEqual(product.stock, 4)

    def test_decrement_skips_unlimited(self):
        product = Product.objects.create(name="Pulsa", price=12000, stock=-1)

        self.assertEqual(self.store.decrement_stock(product.id, 1), 0)
        product.refresh_from_db()
        self.assertEqual(product.stock, -1)

    def test_notifications_after_commit(self):
        events = []
        sub = self.store.subscribe(["products"], lambda table, kind: events.append((table, kind)))
        product = Product.objects.create(name="Kerupuk", price=2000, stock=10)

        with self.captureOnCommitCallbacks(execute=True):
            self.store.decrement_stock(product.id, 1)

        self.assertEqual(events, [("products", "UPDATE")])

        sub.close()
        with self.captureOnCommitCallbacks(execute=True):
            self.store.decrement_stock(product.id, 1)
        self.assertEqual(len(events), 1)

    def test_failing_subscriber_does_not_block_others(self):
        events = []

        def broken(table, kind):
            raise RuntimeError("viewer crashed")

        self.hub.subscribe(["products"], broken)
        self.hub.subscribe(["products"], lambda table, kind: events.append(kind))

        with self.assertLogs("datastore.notifications", level="ERROR"):
            self.hub.deliver("products", "INSERT")

        self.assertEqual(events, ["INSERT"])
