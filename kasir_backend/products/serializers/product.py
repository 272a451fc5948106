# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Validate inventory edits before they reach the record store.
- Render catalog rows (plain dicts from the store) for the counter screen.

Rules:
- price: non-negative integer (smallest currency unit)
- stock: -1 (unlimited) or a non-negative count
"""

from rest_framework import serializers

from datastore.base import UNLIMITED_STOCK


class ProductSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    price = serializers.IntegerField(min_value=0)
    stock = serializers.IntegerField(required=False, default=UNLIMITED_STOCK)
    image_url = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Product name is required")
        return value

    def validate_category(self, value):
        return (value or "").strip()

    def validate_stock(self, value):
        if value < UNLIMITED_STOCK:
            raise serializers.ValidationError(
                "Stock must be -1 (unlimited) or a non-negative count"
            )
        return value


class ProductQuerySerializer(serializers.Serializer):
    """
    For Swagger docs (GET query params).
    """

    q = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
