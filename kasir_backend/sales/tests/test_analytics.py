# sales/tests/test_analytics.py

from datetime import datetime, timedelta, timezone as dt_timezone

from django.core.cache import cache
from django.test import SimpleTestCase, TestCase, override_settings

from sales.services.analytics import (
    ANALYTICS_CACHE_KEY,
    compute_analytics,
    daily_sales_series,
    get_analytics_snapshot,
    top_products,
)
from sales.tests.fakes import FakeRecordStore


def _utc(*args):
    return datetime(*args, tzinfo=dt_timezone.utc)


@override_settings(TIME_ZONE="Asia/Jakarta", ANALYTICS_DAYS=30, TOP_PRODUCTS_LIMIT=10)
class DailySalesSeriesTests(SimpleTestCase):
    """
    GUARANTEES:
    - Grouped by LOCAL calendar date
    - Ascending by date, last 30 dates only
    - Pure: same history -> same output
    """

    def test_groups_by_local_date(self):
        transactions = [
            # 2024-05-01 23:00 UTC is already 2024-05-02 in Jakarta (UTC+7)
            {"timestamp": _utc(2024, 5, 1, 23, 0), "total_amount": 10000},
            {"timestamp": _utc(2024, 5, 2, 3, 0), "total_amount": 5000},
            {"timestamp": _utc(2024, 5, 1, 10, 0), "total_amount": 7000},
        ]

        self.assertEqual(
            daily_sales_series(transactions),
            [
                {"date": "2024-05-01", "total": 7000},
                {"date": "2024-05-02", "total": 15000},
            ],
        )

    def test_keeps_most_recent_30_dates(self):
        start = _utc(2024, 1, 1, 5, 0)
        transactions = [
            {"timestamp": start + timedelta(days=i), "total_amount": 1000 + i}
            for i in range(35)
        ]

        series = daily_sales_series(transactions)

        self.assertEqual(len(series), 30)
        self.assertEqual(series[0]["date"], "2024-01-06")
        self.assertEqual(series[-1]["date"], "2024-02-04")

    def test_accepts_iso_strings(self):
        series = daily_sales_series(
            [{"timestamp": "2024-05-01T10:00:00+00:00", "total_amount": 2500}]
        )
        self.assertEqual(series, [{"date": "2024-05-01", "total": 2500}])

    def test_is_idempotent(self):
        transactions = [
            {"timestamp": _utc(2024, 5, 1, 10, 0), "total_amount": 1000},
            {"timestamp": _utc(2024, 5, 3, 10, 0), "total_amount": 2000},
        ]
        self.assertEqual(daily_sales_series(transactions), daily_sales_series(transactions))


@override_settings(TOP_PRODUCTS_LIMIT=10)
class TopProductsTests(SimpleTestCase):
    """
    GUARANTEES:
    - Grouped by product NAME, summed quantity, descending
    - Ties: the product that reached the tied total first ranks first
    - Top 10 only
    """

    def _items(self, pairs):
        return [{"product_name": n, "quantity": q} for n, q in pairs]

    def test_tie_break_example(self):
        result = top_products(self._items([("A", 3), ("B", 5), ("A", 2)]))
        self.assertEqual(
            [(r["name"], r["total_quantity"]) for r in result],
            [("B", 5), ("A", 5)],
        )

    def test_sorted_descending(self):
        result = top_products(self._items([("Kerupuk", 1), ("Seblak", 4), ("Es Teh", 2)]))
        self.assertEqual([r["name"] for r in result], ["Seblak", "Es Teh", "Kerupuk"])

    def test_keeps_top_ten(self):
        items = self._items([(f"P{i}", i) for i in range(1, 15)])
        result = top_products(items)
        self.assertEqual(len(result), 10)
        self.assertEqual(result[0], {"name": "P14", "total_quantity": 14})

    def test_is_idempotent(self):
        items = self._items([("A", 1), ("B", 1), ("C", 2)])
        self.assertEqual(top_products(items), top_products(items))


class ComputeAnalyticsTests(TestCase):
    def setUp(self):
        cache.clear()
        self.store = FakeRecordStore()
        tx = self.store.insert(
            "transactions",
            {"total_amount": 25000, "customer_name": "Budi", "order_type": "Dine In",
             "payment_method": "Cash", "amount_paid": 30000, "change_amount": 5000},
        )
        self.store.insert_many(
            "transaction_items",
            [
                {"transaction_id": tx["id"], "product_id": 1, "product_name": "Seblak", "quantity": 2, "price": 10000},
                {"transaction_id": tx["id"], "product_id": 2, "product_name": "Es Teh", "quantity": 1, "price": 5000},
            ],
        )

    def test_reads_full_history(self):
        analytics = compute_analytics(store=self.store)

        self.assertEqual(len(analytics["daily_sales"]), 1)
        self.assertEqual(analytics["daily_sales"][0]["total"], 25000)
        self.assertEqual(analytics["top_products"][0], {"name": "Seblak", "total_quantity": 2})

    def test_recompute_is_identical(self):
        self.assertEqual(compute_analytics(store=self.store), compute_analytics(store=self.store))

    def test_snapshot_is_cached(self):
        first = get_analytics_snapshot(store=self.store)
        calls = self.store.call_count("select")

        second = get_analytics_snapshot(store=self.store)

        self.assertEqual(first, second)
        self.assertEqual(self.store.call_count("select"), calls)
        self.assertIsNotNone(cache.get(ANALYTICS_CACHE_KEY))
