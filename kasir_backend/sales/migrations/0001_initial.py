"""
======================================================
PATH: sales/migrations/0001_initial.py
======================================================
MIGRATION: CREATE transactions / transaction_items / checkout journal

Purpose:
- Append-only sale tables shared with the Supabase schema.
- Local intent log used to detect and repair partial commits.
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Transaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("total_amount", models.PositiveBigIntegerField()),
                ("customer_name", models.CharField(max_length=255)),
                (
                    "order_type",
                    models.CharField(
                        choices=[("Dine In", "Dine In"), ("Take Away", "Take Away")],
                        max_length=16,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("Cash", "Cash"),
                            ("QRIS", "QRIS"),
                            ("Transfer", "Bank transfer"),
                            ("Shopee Pay", "Shopee Pay"),
                            ("Dana", "Dana"),
                            ("Lainnya", "Other"),
                        ],
                        max_length=32,
                    ),
                ),
                ("amount_paid", models.PositiveBigIntegerField()),
                ("change_amount", models.PositiveBigIntegerField(default=0)),
                ("timestamp", models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                "db_table": "transactions",
                "ordering": ["-timestamp", "-id"],
            },
        ),
        migrations.CreateModel(
            name="TransactionItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("product_id", models.BigIntegerField(db_index=True)),
                ("product_name", models.CharField(max_length=255)),
                ("quantity", models.PositiveIntegerField()),
                ("price", models.PositiveBigIntegerField()),
                (
                    "transaction",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="items",
                        to="sales.transaction",
                    ),
                ),
            ],
            options={
                "db_table": "transaction_items",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="CheckoutJournal",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("transaction_created", "Transaction created"),
                            ("committed", "Committed"),
                            ("failed", "Failed"),
                            ("repaired", "Repaired"),
                        ],
                        db_index=True,
                        default="pending",
                        max_length=32,
                    ),
                ),
                (
                    "transaction_id",
                    models.BigIntegerField(blank=True, db_index=True, null=True),
                ),
                ("payload", models.JSONField(default=dict)),
                ("error", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "checkout journal",
            },
        ),
    ]
