"""
PATH: pos/urls.py

POS URLS

Purpose:
- Counter checkout (cart lines -> committed sale)
- Per-terminal cart sessions (add / +- / remove / checkout)
"""

from django.urls import path

from pos.views import CartCheckoutView, CartItemDetailView, CartItemsView, CartView, CheckoutView

app_name = "pos"

urlpatterns = [
    path("checkout/", CheckoutView.as_view(), name="checkout"),

    path("carts/<slug:handle>/", CartView.as_view(), name="cart"),
    path("carts/<slug:handle>/items/", CartItemsView.as_view(), name="cart-items"),
    path(
        "carts/<slug:handle>/items/<int:product_id>/",
        CartItemDetailView.as_view(),
        name="cart-item",
    ),
    path("carts/<slug:handle>/checkout/", CartCheckoutView.as_view(), name="cart-checkout"),
]
