# products/serializers/__init__.py

from .product import ProductQuerySerializer, ProductSerializer

__all__ = [
    "ProductSerializer",
    "ProductQuerySerializer",
]
