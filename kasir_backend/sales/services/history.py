# sales/services/history.py

"""
SALES HISTORY

- Latest N transactions (newest first), each with its item rows.
- Two reads: transactions, then items for exactly those ids.
- Snapshot cached for viewers; the change feed rebuilds it, SNAPSHOT_TTL
  expires it for processes that never see the change event.
"""

from __future__ import annotations

from django.conf import settings
from django.core.cache import cache

from datastore.base import TABLE_TRANSACTION_ITEMS, TABLE_TRANSACTIONS
from datastore.registry import get_record_store

HISTORY_CACHE_KEY = "kasir:history"


def fetch_history(*, store=None, limit: int | None = None) -> list[dict]:
    store = store if store is not None else get_record_store()
    limit = settings.HISTORY_LIMIT if limit is None else limit

    transactions = store.select(TABLE_TRANSACTIONS, order="-timestamp", limit=limit)
    if not transactions:
        return []

    ids = [tx["id"] for tx in transactions]
    items = store.select(TABLE_TRANSACTION_ITEMS, {"transaction_id__in": ids}, order="id")

    by_tx: dict = {tx_id: [] for tx_id in ids}
    for item in items:
        by_tx.setdefault(item["transaction_id"], []).append(item)

    return [{**tx, "items": by_tx.get(tx["id"], [])} for tx in transactions]


def refresh_history_snapshot(*, store=None) -> list[dict]:
    history = fetch_history(store=store)
    cache.set(HISTORY_CACHE_KEY, history, timeout=settings.SNAPSHOT_TTL)
    return history


def get_history_snapshot(*, store=None) -> list[dict]:
    history = cache.get(HISTORY_CACHE_KEY)
    if history is None:
        history = refresh_history_snapshot(store=store)
    return history
