# pos/views/cart.py

"""
POS CART SESSION VIEWS

One in-memory cart per terminal, addressed by a handle (terminal id / tab id):

    GET    /api/pos/carts/<handle>/                       current cart
    DELETE /api/pos/carts/<handle>/                       discard the session
    POST   /api/pos/carts/<handle>/items/                 {"product_id": 3} -> add / +1
    PATCH  /api/pos/carts/<handle>/items/<product_id>/    {"delta": -1}
    DELETE /api/pos/carts/<handle>/items/<product_id>/    remove the line
    POST   /api/pos/carts/<handle>/checkout/              commit + clear

Hard rules:
- Price and stock ceiling are snapshotted from the catalog on first add.
- Ceiling / minimum-quantity violations on +/- are silent no-ops (same as
  the counter screen); adding a sold-out product is 409 out_of_stock.
- The cart is cleared only when checkout fully commits.
- Sessions live in this process only (CartRegistry); nothing is persisted.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from datastore.exceptions import RecordStoreError
from datastore.http import error_response, store_error_response
from pos.serializers import (
    AddCartItemInputSerializer,
    CartCheckoutInputSerializer,
    CartSerializer,
    CheckoutResultSerializer,
    UpdateCartItemInputSerializer,
)
from pos.services.cart import OutOfStock, cart_registry
from pos.views.checkout import checkout_error_response
from products.services.catalog import get_products_by_ids
from sales.services.checkout_orchestrator import checkout_cart
from sales.services.exceptions import CheckoutError


def _cart_response(cart, http_status=status.HTTP_200_OK):
    return Response(CartSerializer(cart).data, status=http_status)


class CartView(APIView):
    @extend_schema(responses={200: CartSerializer}, description="Current cart of a terminal session.")
    def get(self, request, handle):
        return _cart_response(cart_registry.get(handle))

    @extend_schema(responses={204: None}, description="Discard a terminal's cart session.")
    def delete(self, request, handle):
        cart_registry.discard(handle)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CartItemsView(APIView):
    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Add a product to the cart (existing line +1, capped at its stock).",
    )
    def post(self, request, handle):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product_id = serializer.validated_data["product_id"]

        try:
            product = get_products_by_ids([product_id]).get(product_id)
        except RecordStoreError as exc:
            return store_error_response(exc)

        if product is None:
            return error_response(
                code="product_not_found",
                message=f"Unknown product id: {product_id}",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        cart = cart_registry.get(handle)
        try:
            cart.add(product)
        except OutOfStock as exc:
            return checkout_error_response(exc)

        return _cart_response(cart)


class CartItemDetailView(APIView):
    @extend_schema(
        request=UpdateCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Change a line's quantity by delta (never below 1, never above the stock snapshot).",
    )
    def patch(self, request, handle, product_id):
        serializer = UpdateCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart = cart_registry.get(handle)
        cart.set_quantity(product_id, serializer.validated_data["delta"])
        return _cart_response(cart)

    @extend_schema(responses={200: CartSerializer}, description="Remove a line from the cart.")
    def delete(self, request, handle, product_id):
        cart = cart_registry.get(handle)
        cart.remove(product_id)
        return _cart_response(cart)


class CartCheckoutView(APIView):
    @extend_schema(
        request=CartCheckoutInputSerializer,
        responses={201: CheckoutResultSerializer},
        description="Commit the terminal's cart as a sale; the cart is cleared on success.",
    )
    def post(self, request, handle):
        serializer = CartCheckoutInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = checkout_cart(
                cart=cart_registry.get(handle),
                customer_name=data.get("customer_name") or "",
                order_type=data["order_type"],
                payment_method=data["payment_method"],
                amount_tendered=data.get("amount_paid"),
            )
        except (CheckoutError, RecordStoreError) as exc:
            return checkout_error_response(exc)

        return Response(result.as_dict(), status=status.HTTP_201_CREATED)
