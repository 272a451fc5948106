# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Products are editable (inventory audit corrections happen here).
- Stock may show negative values after concurrent sales; fix by counting
  the shelf and entering the real number.
"""

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "stock", "updated_at")
    list_filter = ("category",)
    search_fields = ("name", "category")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("name",)
