# datastore/base.py

"""
RECORD STORE PROTOCOL

Purpose:
- One narrow protocol for every read/write the POS core issues against the
  durable relational store (tables: products, transactions, transaction_items).
- Backends: OrmRecordStore (local Django DB) and PostgrestRecordStore (Supabase).

Contract:
- Rows are plain dicts keyed by column name (FKs use "<name>_id").
- Filters are equality maps; a "__in" suffix means set membership:
    {"id": 3}              -> id = 3
    {"transaction_id__in": [1, 2]}
- Order uses Django notation: "name" ascending, "-timestamp" descending.
- decrement_stock() is RELATIVE (stock = stock - quantity, computed by the
  store), never an absolute write computed from a client-side snapshot.
- transactions / transaction_items are append-only: update/delete are refused.

Change notifications:
- subscribe(tables, callback) delivers (table, event_kind) with no payload.
- Treat every event as "something changed": re-read full snapshots.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterable

from datastore.exceptions import ConstraintViolation

TABLE_PRODUCTS = "products"
TABLE_TRANSACTIONS = "transactions"
TABLE_TRANSACTION_ITEMS = "transaction_items"

TABLES = (TABLE_PRODUCTS, TABLE_TRANSACTIONS, TABLE_TRANSACTION_ITEMS)
APPEND_ONLY_TABLES = (TABLE_TRANSACTIONS, TABLE_TRANSACTION_ITEMS)

# Stock sentinel for service items that are never depleted.
UNLIMITED_STOCK = -1

EVENT_INSERT = "INSERT"
EVENT_UPDATE = "UPDATE"
EVENT_DELETE = "DELETE"

ChangeCallback = Callable[[str, str], None]


def require_table(table: str) -> str:
    if table not in TABLES:
        raise ValueError(f"Unknown table: {table!r}")
    return table


def require_mutable(table: str) -> str:
    require_table(table)
    if table in APPEND_ONLY_TABLES:
        raise ConstraintViolation(f"{table} is append-only; rows cannot be changed or removed")
    return table


def split_lookup(key: str) -> tuple[str, str]:
    """
    "id" -> ("id", "exact"), "id__in" -> ("id", "in").
    Only exact + in are part of the protocol.
    """
    if key.endswith("__in"):
        return key[: -len("__in")], "in"
    if "__" in key:
        raise ValueError(f"Unsupported filter lookup: {key!r}")
    return key, "exact"


@dataclass
class Subscription:
    """Handle returned by subscribe(); close() stops delivery."""

    tables: tuple[str, ...]
    callback: ChangeCallback
    _on_close: Callable[["Subscription"], None] | None = field(default=None, repr=False)
    closed: bool = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            self._on_close(self)


class RecordStore:
    """
    Base class for record store backends.

    supports_transactions:
    - True  -> atomic() gives a real all-or-nothing boundary (steps 1-2 of checkout)
    - False -> every call commits independently; atomic() is a no-op
    """

    name = "base"
    supports_transactions = False

    def insert(self, table: str, row: dict) -> dict:
        raise NotImplementedError

    def insert_many(self, table: str, rows: Iterable[dict]) -> list[dict]:
        raise NotImplementedError

    def update(self, table: str, filters: dict, patch: dict) -> int:
        raise NotImplementedError

    def delete(self, table: str, filters: dict) -> int:
        raise NotImplementedError

    def select(
        self,
        table: str,
        filters: dict | None = None,
        *,
        order: str | None = None,
        limit: int | None = None,
        columns: Iterable[str] | None = None,
    ) -> list[dict]:
        raise NotImplementedError

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        """
        Server-side `stock = stock - quantity` for one stock-limited product.
        Returns the number of rows updated (0 if missing or unlimited).
        """
        raise NotImplementedError

    def subscribe(self, tables: Iterable[str], callback: ChangeCallback) -> Subscription:
        raise NotImplementedError

    @contextmanager
    def atomic(self):
        yield self
