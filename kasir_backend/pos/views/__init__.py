# pos/views/__init__.py

from .cart import CartCheckoutView, CartItemDetailView, CartItemsView, CartView
from .checkout import CheckoutView

__all__ = [
    "CartCheckoutView",
    "CartItemDetailView",
    "CartItemsView",
    "CartView",
    "CheckoutView",
]
