# sales/models/checkout_journal.py

"""
CHECKOUT JOURNAL (INTENT LOG)

Purpose:
- Record intent BEFORE the transaction insert, and completion AFTER the item
  insert, so a half-written sale (transaction row without items) can be
  found and repaired instead of discovered by accident.

Lifecycle:
    pending -> transaction_created -> committed
    pending -> failed                       (step 1 failed; nothing written)
    transaction_created -> repaired         (reconcile_partial_commits)

Always lives in the local Django database, whatever record store backend
holds the transactions.
"""

import uuid

from django.db import models


class CheckoutJournal(models.Model):
    STATUS_PENDING = "pending"
    STATUS_TRANSACTION_CREATED = "transaction_created"
    STATUS_COMMITTED = "committed"
    STATUS_FAILED = "failed"
    STATUS_REPAIRED = "repaired"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_TRANSACTION_CREATED, "Transaction created"),
        (STATUS_COMMITTED, "Committed"),
        (STATUS_FAILED, "Failed"),
        (STATUS_REPAIRED, "Repaired"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )

    transaction_id = models.BigIntegerField(null=True, blank=True, db_index=True)

    # {"header": {...transaction row...},
    #  "items": [{product_id, product_name, quantity, price}],
    #  "unlimited_product_ids": [...]}
    payload = models.JSONField(default=dict)
    error = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "checkout journal"

    def __str__(self):
        return f"{self.id} [{self.status}] tx={self.transaction_id}"

    @property
    def item_rows(self) -> list[dict]:
        return list((self.payload or {}).get("items") or [])

    def mark(self, status: str, **fields) -> None:
        self.status = status
        for key, value in fields.items():
            setattr(self, key, value)
        self.save(update_fields=["status", "updated_at", *fields.keys()])
