# sales/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Commit an OrderDraft as one Transaction + its TransactionItems.
- Hand the committed lines to the stock reconciler.
- Trigger the catalog + history refresh once the sale is durable.

Hard rules:
- Preconditions are checked before ANY store call (and before the store is
  even resolved): EmptyCart, MissingCustomer, InsufficientPayment.
- Money is integer smallest-unit (IDR); totals are computed here from the
  line snapshots, never taken from the client.
- Items carry name / price snapshots, never live product lookups.

Write sequence:
    journal(pending)
    1. insert transaction            -> PersistenceError on failure
    journal(transaction_created)     (non-transactional stores only)
    2. insert items (one call)       -> PartialCommit on failure
    journal(committed)
    3. stock decrements (best effort -> warnings)
    refresh trigger

Atomicity:
- Transactional store (ORM): steps 1-2 run inside store.atomic(); a step-2
  failure rolls back step 1 and is reported as PersistenceError.
- Remote store (PostgREST): each call commits on its own; a step-2 failure
  leaves the transaction row behind, the journal keeps it in
  "transaction_created" and `manage.py reconcile_partial_commits` repairs it.
- Once step 1 is issued there is no abort path.

Journal failures after step 1:
- Once the store has returned a transaction id, every later failure is a
  PartialCommit carrying that id, including a failed journal write. The id
  is written to the journal on a second attempt; if the local DB is still
  down, the entry stays "pending" and the reconciler matches it to its
  transaction by content once it is stale.
- A failed "committed" mark does not fail the sale (items are already in);
  it is logged and the stale-pending sweep closes the entry later.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError

from datastore.base import (
    EVENT_INSERT,
    EVENT_UPDATE,
    TABLE_PRODUCTS,
    TABLE_TRANSACTION_ITEMS,
    TABLE_TRANSACTIONS,
)
from datastore.exceptions import ConfigurationError, RecordStoreError
from datastore.registry import get_record_store
from pos.services.cart import OrderDraft, PaymentMethod
from sales.models import CheckoutJournal
from sales.services.exceptions import (
    CheckoutError,
    EmptyCart,
    InsufficientPayment,
    MissingCustomer,
    PartialCommit,
    PersistenceError,
    StockUpdateWarning,
)
from sales.services.stock_reconciler import apply_stock_decrements

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    transaction_id: int
    total_amount: int
    amount_paid: int
    change_amount: int
    warnings: tuple[StockUpdateWarning, ...] = field(default_factory=tuple)

    def as_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "total_amount": self.total_amount,
            "amount_paid": self.amount_paid,
            "change_amount": self.change_amount,
            "warnings": [w.as_dict() for w in self.warnings],
        }


# =====================================================
# HELPERS
# =====================================================

def validate_draft(draft: OrderDraft) -> None:
    if draft.is_empty:
        raise EmptyCart("Cart is empty")

    if not (draft.customer_name or "").strip():
        raise MissingCustomer("Customer name is required")

    for line in draft.lines:
        if line.quantity < 1:
            raise CheckoutError(f"Invalid quantity for {line.name}: {line.quantity}")

    if draft.payment_method == PaymentMethod.CASH and draft.amount_tendered < draft.subtotal:
        raise InsufficientPayment(tendered=draft.amount_tendered, total=draft.subtotal)


def _transaction_row(draft: OrderDraft) -> dict:
    return {
        "total_amount": draft.subtotal,
        "customer_name": draft.customer_name.strip(),
        "order_type": str(draft.order_type),
        "amount_paid": draft.amount_tendered,
        "change_amount": draft.change,
        "payment_method": str(draft.payment_method),
    }


def _item_rows(draft: OrderDraft) -> list[dict]:
    return [
        {
            "product_id": line.product_id,
            "product_name": line.name,
            "quantity": line.quantity,
            "price": line.price,
        }
        for line in draft.lines
    ]


def _open_journal(draft: OrderDraft, header: dict, items: list[dict]) -> CheckoutJournal:
    payload = {
        "header": header,
        "items": items,
        "unlimited_product_ids": [line.product_id for line in draft.lines if line.is_unlimited],
    }
    try:
        return CheckoutJournal.objects.create(payload=payload)
    except DatabaseError as exc:
        raise PersistenceError(f"Could not record checkout intent: {exc}") from exc


def _record_transaction_created(journal: CheckoutJournal, transaction_id: int) -> None:
    try:
        journal.mark(CheckoutJournal.STATUS_TRANSACTION_CREATED, transaction_id=transaction_id)
    except DatabaseError as exc:
        raise PartialCommit(
            f"Transaction {transaction_id} was saved but the checkout journal could not record it: {exc}",
            transaction_id=transaction_id,
            journal_id=journal.id,
        ) from exc


def _keep_for_repair(journal: CheckoutJournal, exc: PartialCommit) -> None:
    context = {"transaction_id": exc.transaction_id, "journal_id": str(journal.id)}
    try:
        journal.mark(
            CheckoutJournal.STATUS_TRANSACTION_CREATED,
            transaction_id=exc.transaction_id,
            error=str(exc),
        )
    except DatabaseError:
        logger.exception("Partial commit could not be journaled", extra=context)
        return
    logger.error("Partial commit: transaction without items", extra=context)


def _close_journal(journal: CheckoutJournal, transaction_id: int) -> None:
    try:
        journal.mark(CheckoutJournal.STATUS_COMMITTED, transaction_id=transaction_id)
    except DatabaseError:
        logger.exception(
            "Checkout committed but its journal entry is still open",
            extra={"transaction_id": transaction_id, "journal_id": str(journal.id)},
        )


def _notify_committed(listener) -> None:
    if listener is None:
        from sales.services.change_feed import get_change_feed

        listener = get_change_feed()
    listener.on_event(TABLE_PRODUCTS, EVENT_UPDATE)
    listener.on_event(TABLE_TRANSACTIONS, EVENT_INSERT)


# =====================================================
# COMMIT
# =====================================================

def commit(draft: OrderDraft, *, store=None, listener=None) -> CheckoutResult:
    validate_draft(draft)

    store = store if store is not None else get_record_store()

    header = _transaction_row(draft)
    items = _item_rows(draft)
    journal = _open_journal(draft, header, items)

    try:
        with store.atomic():
            # Step 1: transaction row (store assigns id + timestamp)
            row = store.insert(TABLE_TRANSACTIONS, header)
            transaction_id = row["id"]

            if not store.supports_transactions:
                _record_transaction_created(journal, transaction_id)

            # Step 2: all item rows in one call
            try:
                store.insert_many(
                    TABLE_TRANSACTION_ITEMS,
                    [{**item, "transaction_id": transaction_id} for item in items],
                )
            except RecordStoreError as exc:
                if store.supports_transactions:
                    raise
                raise PartialCommit(
                    f"Transaction {transaction_id} was saved but its items were not: {exc}",
                    transaction_id=transaction_id,
                    journal_id=journal.id,
                ) from exc

    except PartialCommit as exc:
        _keep_for_repair(journal, exc)
        raise
    except ConfigurationError as exc:
        journal.mark(CheckoutJournal.STATUS_FAILED, error=str(exc))
        raise
    except RecordStoreError as exc:
        journal.mark(CheckoutJournal.STATUS_FAILED, error=str(exc), transaction_id=None)
        logger.warning("Checkout not persisted: %s", exc, extra={"journal_id": str(journal.id)})
        raise PersistenceError(f"Sale was not saved: {exc}") from exc

    _close_journal(journal, transaction_id)

    # Step 3: best-effort stock decrements
    warnings = apply_stock_decrements(draft.lines, store=store)

    logger.info(
        "Checkout committed",
        extra={
            "transaction_id": transaction_id,
            "total_amount": header["total_amount"],
            "lines": len(items),
            "stock_warnings": len(warnings),
        },
    )

    _notify_committed(listener)

    return CheckoutResult(
        transaction_id=transaction_id,
        total_amount=header["total_amount"],
        amount_paid=header["amount_paid"],
        change_amount=header["change_amount"],
        warnings=tuple(warnings),
    )


def checkout_cart(
    *,
    cart,
    customer_name: str,
    order_type: str,
    payment_method: str,
    amount_tendered: int | None = None,
    store=None,
    listener=None,
) -> CheckoutResult:
    """
    Build the draft from a CartSession and commit it.
    The cart is cleared only when the sale is fully committed.
    """
    draft = cart.draft(
        customer_name=customer_name,
        order_type=order_type,
        payment_method=payment_method,
        amount_tendered=amount_tendered,
    )
    result = commit(draft, store=store, listener=listener)
    cart.clear()
    return result
