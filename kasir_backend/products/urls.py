# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register catalog / inventory routes under /api/products/

NOTE:
- "categories/" is registered BEFORE "<int:product_id>/" for readability;
  the int converter keeps them from colliding anyway.
"""

from django.urls import path

from products.views import CategoryListView, ProductDetailView, ProductListCreateView

urlpatterns = [
    path("", ProductListCreateView.as_view(), name="products-list"),
    path("categories/", CategoryListView.as_view(), name="products-categories"),
    path("<int:product_id>/", ProductDetailView.as_view(), name="products-detail"),
]
