# products/services/catalog.py

"""
======================================================
PATH: products/services/catalog.py
======================================================
CATALOG SERVICES

Purpose:
- Full catalog reads through the record store (ordered by name).
- Search / category filtering and category listing for the counter screen.
- Inventory CRUD (create / edit / delete) through the record store.
- Catalog snapshot cache refreshed by the change feed.

Rules:
- Snapshots are always full re-reads; we never patch a cached list in place.
- Deleting a product is allowed: historical transaction items keep their own
  name/price snapshots.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.core.cache import cache

from datastore.base import TABLE_PRODUCTS
from datastore.registry import get_record_store

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = "kasir:catalog"
ALL_CATEGORIES = "All"

PRODUCT_COLUMNS = ("id", "name", "category", "price", "stock", "image_url")
EDITABLE_FIELDS = ("name", "category", "price", "stock", "image_url")


class ProductNotFoundError(Exception):
    pass


def _store(store):
    return store if store is not None else get_record_store()


def _editable(data: dict) -> dict:
    return {k: data[k] for k in EDITABLE_FIELDS if k in data}


# -----------------------------
# READS
# -----------------------------
def fetch_products(*, store=None) -> list[dict]:
    return _store(store).select(TABLE_PRODUCTS, order="name", columns=PRODUCT_COLUMNS)


def get_products_by_ids(product_ids, *, store=None) -> dict[int, dict]:
    ids = sorted({int(pid) for pid in product_ids})
    if not ids:
        return {}
    rows = _store(store).select(
        TABLE_PRODUCTS, {"id__in": ids}, columns=PRODUCT_COLUMNS
    )
    return {int(row["id"]): row for row in rows}


def filter_products(products, *, search: str = "", category: str | None = None) -> list[dict]:
    """
    Case-insensitive name search + exact category match.
    category None / "" / "All" means no category filter.
    """
    needle = (search or "").strip().lower()
    wanted = (category or "").strip()
    if wanted == ALL_CATEGORIES:
        wanted = ""

    out = []
    for product in products:
        if needle and needle not in str(product.get("name") or "").lower():
            continue
        if wanted and product.get("category") != wanted:
            continue
        out.append(product)
    return out


def list_categories(products) -> list[str]:
    """["All", *distinct categories in first-seen order]"""
    seen = []
    for product in products:
        cat = product.get("category") or ""
        if cat and cat not in seen:
            seen.append(cat)
    return [ALL_CATEGORIES, *seen]


# -----------------------------
# INVENTORY WRITES
# -----------------------------
def create_product(*, data: dict, store=None) -> dict:
    row = _store(store).insert(TABLE_PRODUCTS, _editable(data))
    invalidate_catalog_snapshot()
    logger.info("Product created", extra={"product_id": row.get("id")})
    return row


def update_product(product_id: int, *, data: dict, store=None) -> dict:
    s = _store(store)
    patch = _editable(data)
    if patch:
        updated = s.update(TABLE_PRODUCTS, {"id": int(product_id)}, patch)
        if not updated:
            raise ProductNotFoundError(f"Product {product_id} not found")
        invalidate_catalog_snapshot()

    rows = s.select(TABLE_PRODUCTS, {"id": int(product_id)}, columns=PRODUCT_COLUMNS)
    if not rows:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return rows[0]


def delete_product(product_id: int, *, store=None) -> None:
    deleted = _store(store).delete(TABLE_PRODUCTS, {"id": int(product_id)})
    if not deleted:
        raise ProductNotFoundError(f"Product {product_id} not found")
    invalidate_catalog_snapshot()
    logger.info("Product deleted", extra={"product_id": product_id})


# -----------------------------
# SNAPSHOT (viewer cache)
# -----------------------------
def refresh_catalog_snapshot(*, store=None) -> list[dict]:
    products = fetch_products(store=store)
    cache.set(CATALOG_CACHE_KEY, products, timeout=settings.SNAPSHOT_TTL)
    return products


def get_catalog_snapshot(*, store=None) -> list[dict]:
    products = cache.get(CATALOG_CACHE_KEY)
    if products is None:
        products = refresh_catalog_snapshot(store=store)
    return products


def invalidate_catalog_snapshot() -> None:
    cache.delete(CATALOG_CACHE_KEY)
