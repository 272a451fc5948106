# sales/models/transaction_item.py

"""
Represents an immutable snapshot of a sold line item.

Notes:
- product_id is a plain integer, not a FK: products may be deleted or renamed
  later and history must keep displaying what was sold.
- product_name / price are copied from the cart line at checkout.
"""

from django.core.exceptions import ValidationError
from django.db import models

from .transaction import Transaction


class TransactionItem(models.Model):
    transaction = models.ForeignKey(
        Transaction,
        on_delete=models.PROTECT,
        related_name="items",
    )

    product_id = models.BigIntegerField(db_index=True)
    product_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    price = models.PositiveBigIntegerField()

    class Meta:
        db_table = "transaction_items"
        ordering = ["id"]

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"

    @property
    def line_total(self) -> int:
        return int(self.price) * int(self.quantity)

    def clean(self):
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("TransactionItem records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("TransactionItem records cannot be deleted")
