# sales/tests/test_history.py

import time
from unittest import mock

from django.core.cache import cache
from django.test import TestCase, override_settings

from sales.services.analytics import get_analytics_snapshot
from sales.services.change_feed import ChangeFeedListener
from sales.services.history import fetch_history, get_history_snapshot
from sales.tests.fakes import FakeRecordStore


class SalesHistoryTests(TestCase):
    def setUp(self):
        self.store = FakeRecordStore()
        for name, total in (("Budi", 10000), ("Sari", 5000), ("Andi", 7000)):
            tx = self.store.insert(
                "transactions",
                {"total_amount": total, "customer_name": name, "order_type": "Dine In",
                 "payment_method": "QRIS", "amount_paid": total, "change_amount": 0},
            )
            self.store.insert_many(
                "transaction_items",
                [{"transaction_id": tx["id"], "product_id": 1, "product_name": "Seblak",
                  "quantity": 1, "price": total}],
            )

    def test_newest_first_with_items(self):
        history = fetch_history(store=self.store)

        self.assertEqual([tx["customer_name"] for tx in history], ["Andi", "Sari", "Budi"])
        self.assertEqual(len(history[0]["items"]), 1)
        self.assertEqual(history[0]["items"][0]["price"], 7000)

    def test_limit(self):
        history = fetch_history(store=self.store, limit=2)
        self.assertEqual([tx["customer_name"] for tx in history], ["Andi", "Sari"])

    def test_transaction_without_items_is_listed(self):
        self.store.insert(
            "transactions",
            {"total_amount": 1000, "customer_name": "Orphan", "order_type": "Take Away",
             "payment_method": "Cash", "amount_paid": 1000, "change_amount": 0},
        )

        history = fetch_history(store=self.store)

        self.assertEqual(history[0]["customer_name"], "Orphan")
        self.assertEqual(history[0]["items"], [])

    def test_empty_history_skips_item_read(self):
        store = FakeRecordStore()
        self.assertEqual(fetch_history(store=store), [])
        self.assertEqual(store.call_count("select"), 1)


@override_settings(SNAPSHOT_TTL=30)
class SnapshotExpiryTests(TestCase):
    """
    GUARANTEES:
    - Without a change feed, cached snapshots still expire after SNAPSHOT_TTL
    - A sale written by another terminal becomes visible without ?refresh=1
    """

    def setUp(self):
        cache.clear()
        self.store = FakeRecordStore(realtime=False)
        self.listener = ChangeFeedListener(store=self.store)

    def tearDown(self):
        cache.clear()

    def test_sale_from_another_terminal_appears_after_ttl(self):
        self.assertFalse(self.listener.start())
        self.assertEqual(get_history_snapshot(store=self.store), [])

        self.store.insert(
            "transactions",
            {"total_amount": 8000, "customer_name": "Sari", "order_type": "Take Away",
             "payment_method": "QRIS", "amount_paid": 8000, "change_amount": 0},
        )
        self.assertEqual(get_history_snapshot(store=self.store), [])

        with mock.patch("time.time", return_value=time.time() + 31):
            history = get_history_snapshot(store=self.store)

        self.assertEqual([tx["customer_name"] for tx in history], ["Sari"])

    def test_analytics_snapshot_expires_too(self):
        self.assertEqual(get_analytics_snapshot(store=self.store)["daily_sales"], [])

        self.store.insert(
            "transactions",
            {"total_amount": 8000, "customer_name": "Sari", "order_type": "Take Away",
             "payment_method": "QRIS", "amount_paid": 8000, "change_amount": 0},
        )

        with mock.patch("time.time", return_value=time.time() + 31):
            analytics = get_analytics_snapshot(store=self.store)

        self.assertEqual(sum(day["total"] for day in analytics["daily_sales"]), 8000)

    @override_settings(SNAPSHOT_TTL=None)
    def test_ttl_disabled_keeps_snapshot(self):
        self.assertEqual(get_history_snapshot(store=self.store), [])
        self.store.insert(
            "transactions",
            {"total_amount": 8000, "customer_name": "Sari", "order_type": "Take Away",
             "payment_method": "QRIS", "amount_paid": 8000, "change_amount": 0},
        )

        with mock.patch("time.time", return_value=time.time() + 3600):
            self.assertEqual(get_history_snapshot(store=self.store), [])
