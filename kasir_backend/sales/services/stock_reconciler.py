# sales/services/stock_reconciler.py

"""
STOCK RECONCILER

Purpose:
- Apply per-line stock decrements after a sale is committed.

Rules:
- Unlimited lines (stock ceiling -1) are skipped.
- Each limited line is ONE relative decrement (stock = stock - qty) computed
  by the store, never an absolute value computed here from a cart snapshot.
- Best effort: a failing line becomes a StockUpdateWarning, the other lines
  still run, and nothing is rolled back. The sale is the authoritative event.
- No clamp at zero. Overlapping sales may drive stock negative; that drift is
  left visible for the next manual inventory count.
"""

from __future__ import annotations

import logging

from datastore.exceptions import RecordStoreError
from sales.services.exceptions import StockUpdateWarning

logger = logging.getLogger(__name__)


def apply_stock_decrements(lines, *, store) -> list[StockUpdateWarning]:
    warnings: list[StockUpdateWarning] = []

    for line in lines:
        if line.is_unlimited:
            continue

        reason = ""
        try:
            updated = store.decrement_stock(line.product_id, line.quantity)
            if not updated:
                reason = "product not found or no longer stock-limited"
        except RecordStoreError as exc:
            reason = str(exc) or exc.__class__.__name__

        if not reason:
            continue

        warning = StockUpdateWarning(
            product_id=line.product_id,
            product_name=line.name,
            quantity=line.quantity,
            reason=reason,
        )
        logger.warning(
            "Stock update failed for %s (x%s): %s",
            line.name,
            line.quantity,
            reason,
            extra={"product_id": line.product_id, "quantity": line.quantity},
        )
        warnings.append(warning)

    return warnings
