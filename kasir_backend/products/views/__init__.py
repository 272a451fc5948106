# products/views/__init__.py

"""
Products views package exports.
"""

from .product import CategoryListView, ProductDetailView, ProductListCreateView

__all__ = [
    "CategoryListView",
    "ProductDetailView",
    "ProductListCreateView",
]
