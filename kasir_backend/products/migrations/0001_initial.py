"""
======================================================
PATH: products/migrations/0001_initial.py
======================================================
MIGRATION: CREATE products

Purpose:
- Catalog table shared with the Supabase schema (db_table="products").
- stock = -1 marks unlimited/service items.
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
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
                ("name", models.CharField(db_index=True, max_length=255)),
                (
                    "category",
                    models.CharField(blank=True, db_index=True, default="", max_length=64),
                ),
                ("price", models.PositiveBigIntegerField(default=0)),
                ("stock", models.IntegerField(default=-1)),
                ("image_url", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "products",
                "ordering": ["name"],
            },
        ),
        migrations.AddIndex(
            model_name="product",
            index=models.Index(fields=["category", "name"], name="products_category_name_idx"),
        ),
    ]
