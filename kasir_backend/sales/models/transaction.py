# sales/models/transaction.py

from django.core.exceptions import ValidationError
from django.db import models

from pos.services.cart import OrderType, PaymentMethod


class Transaction(models.Model):
    """
    One committed counter sale.

    GUARANTEES:
    - Append-only: once saved, a row is never updated or deleted
    - id + timestamp are assigned by the store on insert
    - total_amount is the sum of its items' price * quantity
    """

    total_amount = models.PositiveBigIntegerField()
    customer_name = models.CharField(max_length=255)
    order_type = models.CharField(max_length=16, choices=OrderType.choices)
    payment_method = models.CharField(max_length=32, choices=PaymentMethod.choices)
    amount_paid = models.PositiveBigIntegerField()
    change_amount = models.PositiveBigIntegerField(default=0)

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        db_table = "transactions"
        ordering = ["-timestamp", "-id"]

    def __str__(self):
        return f"#{self.pk} {self.customer_name} ({self.total_amount})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Transactions are immutable once created")
        self.customer_name = (self.customer_name or "").strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Transactions cannot be deleted")
