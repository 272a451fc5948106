# sales/services/analytics.py

"""
SALES ANALYTICS (PURE PROJECTIONS)

Purpose:
- Daily sales series: transactions grouped by LOCAL calendar date
  (settings.TIME_ZONE), summed total_amount, ascending, last N dates.
- Top products: items grouped by product NAME (renamed / recreated products
  with the same display name merge), summed quantity, descending, top N.

Rules:
- Always recomputed from full raw history. No incremental state.
- daily_sales_series / top_products are pure functions of their input;
  calling them twice on the same history yields identical output.

Top products tie-break:
- Groups are ordered by the row that completed them (a product's last
  contributing row), then stable-sorted by quantity descending. So for equal
  totals, the product that reached that total first ranks first:
      [("A", 3), ("B", 5), ("A", 2)] -> [("B", 5), ("A", 5)]
"""

from __future__ import annotations

from datetime import date, datetime, timezone as dt_timezone

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from datastore.base import TABLE_TRANSACTION_ITEMS, TABLE_TRANSACTIONS
from datastore.registry import get_record_store

ANALYTICS_CACHE_KEY = "kasir:analytics"


def _local_date(value) -> date | None:
    if isinstance(value, str):
        value = parse_datetime(value)
    if not isinstance(value, datetime):
        return None
    if timezone.is_naive(value):
        value = timezone.make_aware(value, dt_timezone.utc)
    return timezone.localdate(value)


def daily_sales_series(transactions, *, days: int | None = None) -> list[dict]:
    days = settings.ANALYTICS_DAYS if days is None else days

    totals: dict[date, int] = {}
    for tx in transactions:
        day = _local_date(tx.get("timestamp"))
        if day is None:
            continue
        totals[day] = totals.get(day, 0) + int(tx.get("total_amount") or 0)

    series = [{"date": day.isoformat(), "total": total} for day, total in sorted(totals.items())]
    if days and len(series) > days:
        series = series[-days:]
    return series


def top_products(items, *, limit: int | None = None) -> list[dict]:
    limit = settings.TOP_PRODUCTS_LIMIT if limit is None else limit

    quantities: dict[str, int] = {}
    completed_at: dict[str, int] = {}
    for index, item in enumerate(items):
        name = item.get("product_name") or ""
        quantities[name] = quantities.get(name, 0) + int(item.get("quantity") or 0)
        completed_at[name] = index

    names = sorted(quantities, key=completed_at.__getitem__)
    names.sort(key=lambda n: quantities[n], reverse=True)

    return [{"name": n, "total_quantity": quantities[n]} for n in names[:limit]]


def compute_analytics(*, store=None) -> dict:
    store = store if store is not None else get_record_store()

    transactions = store.select(
        TABLE_TRANSACTIONS,
        order="timestamp",
        columns=("id", "timestamp", "total_amount"),
    )
    items = store.select(
        TABLE_TRANSACTION_ITEMS,
        order="id",
        columns=("id", "product_name", "quantity"),
    )

    return {
        "daily_sales": daily_sales_series(transactions),
        "top_products": top_products(items),
    }


def refresh_analytics_snapshot(*, store=None) -> dict:
    analytics = compute_analytics(store=store)
    cache.set(ANALYTICS_CACHE_KEY, analytics, timeout=settings.SNAPSHOT_TTL)
    return analytics


def get_analytics_snapshot(*, store=None) -> dict:
    analytics = cache.get(ANALYTICS_CACHE_KEY)
    if analytics is None:
        analytics = refresh_analytics_snapshot(store=store)
    return analytics
