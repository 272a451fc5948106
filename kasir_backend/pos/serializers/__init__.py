# pos/serializers/__init__.py

from .cart import (
    AddCartItemInputSerializer,
    CartCheckoutInputSerializer,
    CartSerializer,
    UpdateCartItemInputSerializer,
)
from .checkout import CheckoutInputSerializer, CheckoutItemInputSerializer, CheckoutResultSerializer

__all__ = [
    "AddCartItemInputSerializer",
    "CartCheckoutInputSerializer",
    "CartSerializer",
    "CheckoutInputSerializer",
    "CheckoutItemInputSerializer",
    "CheckoutResultSerializer",
    "UpdateCartItemInputSerializer",
]
