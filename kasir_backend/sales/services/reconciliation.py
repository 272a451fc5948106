# sales/services/reconciliation.py

"""
PARTIAL-COMMIT REPAIR

Finds checkout journal entries whose sale may be half-written and completes
them from the journal payload:
- "transaction_created": transaction row written, item insert failed
- "pending" older than CHECKOUT_JOURNAL_STALE_SECONDS: the checkout never
  closed its journal (the local DB failed after step 1, or the process died).
  The transaction is located by its header (customer, amounts, order type,
  payment method) among rows no other journal entry has claimed.

repair_partial_commit():
- items missing      -> insert the journaled item rows, apply the stock
                        decrements once (checkout never reached them), mark repaired
- items present      -> mark repaired, no writes
- transaction gone   -> mark failed (nothing to attach items to)
- stale pending, no matching transaction -> mark failed (step 1 never landed)

Concurrency:
- The entry is re-read with select_for_update() inside transaction.atomic()
  and its status checked again, so two concurrent --apply runs cannot both
  insert items. The loser gets REPAIR_SKIPPED.

Record store errors propagate; the entry keeps its status and the next run
retries it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from datastore.base import (
    EVENT_INSERT,
    TABLE_TRANSACTION_ITEMS,
    TABLE_TRANSACTIONS,
    UNLIMITED_STOCK,
)
from datastore.registry import get_record_store
from pos.services.cart import CartLine
from sales.models import CheckoutJournal
from sales.services.stock_reconciler import apply_stock_decrements

logger = logging.getLogger(__name__)

REPAIR_ITEMS_INSERTED = "items_inserted"
REPAIR_ALREADY_COMPLETE = "already_complete"
REPAIR_TRANSACTION_MISSING = "transaction_missing"
REPAIR_NOTHING_WRITTEN = "nothing_written"
REPAIR_SKIPPED = "skipped"

REPAIRABLE_STATUSES = (
    CheckoutJournal.STATUS_PENDING,
    CheckoutJournal.STATUS_TRANSACTION_CREATED,
)

# Header columns that identify a transaction written for a journal entry.
MATCH_COLUMNS = ("customer_name", "total_amount", "order_type", "payment_method", "amount_paid")


def _stale_cutoff(now=None):
    return (now or timezone.now()) - timedelta(seconds=settings.CHECKOUT_JOURNAL_STALE_SECONDS)


def find_partial_commits(*, now=None):
    return CheckoutJournal.objects.filter(
        Q(status=CheckoutJournal.STATUS_TRANSACTION_CREATED, transaction_id__isnull=False)
        | Q(status=CheckoutJournal.STATUS_PENDING, created_at__lte=_stale_cutoff(now))
    ).order_by("created_at")


def _journal_lines(entry: CheckoutJournal) -> list[CartLine]:
    unlimited = set((entry.payload or {}).get("unlimited_product_ids") or [])
    return [
        CartLine(
            product_id=int(row["product_id"]),
            name=row.get("product_name") or "",
            price=int(row.get("price") or 0),
            stock_ceiling=UNLIMITED_STOCK if row["product_id"] in unlimited else int(row["quantity"]),
            quantity=int(row["quantity"]),
        )
        for row in entry.item_rows
    ]


def _locate_transaction(entry: CheckoutJournal, store) -> int | None:
    header = (entry.payload or {}).get("header") or {}
    filters = {column: header[column] for column in MATCH_COLUMNS if column in header}
    if not filters:
        return None

    candidates = store.select(
        TABLE_TRANSACTIONS,
        filters,
        order="timestamp",
        columns=("id", "timestamp"),
    )
    if not candidates:
        return None

    claimed = set(
        CheckoutJournal.objects.filter(transaction_id__in=[row["id"] for row in candidates])
        .exclude(pk=entry.pk)
        .values_list("transaction_id", flat=True)
    )
    # The store's clock may lag ours; allow one stale window of skew.
    earliest = entry.created_at - timedelta(seconds=settings.CHECKOUT_JOURNAL_STALE_SECONDS)

    for row in candidates:
        if row["id"] in claimed:
            continue
        stamp = row.get("timestamp")
        if isinstance(stamp, datetime) and timezone.is_aware(stamp) and stamp < earliest:
            continue
        return row["id"]
    return None


def _repair_locked(entry: CheckoutJournal, store) -> tuple[str, int | None]:
    tx_id = entry.transaction_id

    if entry.status == CheckoutJournal.STATUS_PENDING and tx_id is None:
        tx_id = _locate_transaction(entry, store)
        if tx_id is None:
            entry.mark(
                CheckoutJournal.STATUS_FAILED,
                error="Checkout never wrote a transaction",
            )
            logger.info("Stale checkout closed: nothing written", extra={"journal_id": str(entry.id)})
            return REPAIR_NOTHING_WRITTEN, None
        entry.mark(CheckoutJournal.STATUS_TRANSACTION_CREATED, transaction_id=tx_id)

    if not store.select(TABLE_TRANSACTIONS, {"id": tx_id}, columns=("id",)):
        entry.mark(
            CheckoutJournal.STATUS_FAILED,
            error=f"Transaction {tx_id} not found during repair",
        )
        logger.error("Partial commit repair: transaction missing", extra={"transaction_id": tx_id})
        return REPAIR_TRANSACTION_MISSING, tx_id

    existing = store.select(
        TABLE_TRANSACTION_ITEMS,
        {"transaction_id": tx_id},
        columns=("id",),
    )
    if existing:
        entry.mark(CheckoutJournal.STATUS_REPAIRED)
        logger.info("Partial commit already complete", extra={"transaction_id": tx_id})
        return REPAIR_ALREADY_COMPLETE, tx_id

    store.insert_many(
        TABLE_TRANSACTION_ITEMS,
        [{**row, "transaction_id": tx_id} for row in entry.item_rows],
    )
    entry.mark(CheckoutJournal.STATUS_REPAIRED)
    return REPAIR_ITEMS_INSERTED, tx_id


def repair_partial_commit(entry: CheckoutJournal, *, store=None, listener=None) -> str:
    store = store if store is not None else get_record_store()

    with transaction.atomic():
        locked = CheckoutJournal.objects.select_for_update().get(pk=entry.pk)
        if locked.status not in REPAIRABLE_STATUSES:
            logger.info(
                "Journal entry already handled",
                extra={"journal_id": str(locked.id), "status": locked.status},
            )
            return REPAIR_SKIPPED
        outcome, tx_id = _repair_locked(locked, store)

    if outcome != REPAIR_ITEMS_INSERTED:
        return outcome

    warnings = apply_stock_decrements(_journal_lines(locked), store=store)
    logger.info(
        "Partial commit repaired",
        extra={"transaction_id": tx_id, "stock_warnings": len(warnings)},
    )

    if listener is None:
        from sales.services.change_feed import get_change_feed

        listener = get_change_feed()
    listener.on_event(TABLE_TRANSACTIONS, EVENT_INSERT)
    return outcome
