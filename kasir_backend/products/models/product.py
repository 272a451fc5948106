# products/models/product.py

from django.core.exceptions import ValidationError
from django.db import models

from datastore.base import UNLIMITED_STOCK


class Product(models.Model):
    """
    Represents a sellable product on the counter catalog.

    STOCK MODEL (IMPORTANT):
    - stock = -1 means UNLIMITED (service items: printing, top-ups, ...)
    - otherwise stock is a plain counter decremented by checkout
    - inventory edits must keep stock >= -1; checkout decrements may drift
      below zero under concurrent sales (audited manually, never clamped)

    PRICE:
    - integer amount in the smallest currency unit (IDR has no minor unit)
    - snapshotted into TransactionItem at sale time
    """

    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=64, blank=True, default="", db_index=True)
    price = models.PositiveBigIntegerField(default=0)
    stock = models.IntegerField(default=UNLIMITED_STOCK)
    image_url = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "name"], name="products_category_name_idx"),
        ]

    def __str__(self):
        stock = "unlimited" if self.is_unlimited else self.stock
        return f"{self.name} [{self.category or '-'}] ({stock})"

    @property
    def is_unlimited(self) -> bool:
        return self.stock == UNLIMITED_STOCK

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": "Product name is required"})

        if self.price is None or int(self.price) < 0:
            raise ValidationError({"price": "Price must be non-negative"})

    def save(self, *args, **kwargs):
        self.name = (self.name or "").strip()
        self.category = (self.category or "").strip()
        self.full_clean()
        return super().save(*args, **kwargs)
