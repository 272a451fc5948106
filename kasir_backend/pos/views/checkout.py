# pos/views/checkout.py

"""
POS CHECKOUT VIEW

POST /api/pos/checkout/
{
    "customer_name": "Budi",
    "order_type": "Dine In",
    "payment_method": "Cash",
    "amount_paid": 30000,
    "items": [{"product_id": 1, "quantity": 2}, {"product_id": 7, "quantity": 1}]
}

Flow:
- Cheap checks first (empty cart, blank customer): no store call at all.
- Load current product rows, replay them into a CartSession (same stock
  ceiling rules as the counter screen), commit through the orchestrator.

Status codes:
- 201 committed (warnings list may be non-empty: stock updates that failed)
- 400 empty_cart / missing_customer / insufficient_payment
- 404 product_not_found
- 409 out_of_stock
- 500 partial_commit (transaction_id included; run reconcile_partial_commits)
- 502 persistence_error (nothing saved, safe to retry)
- 503 configuration_missing / configuration_invalid
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from datastore.exceptions import RecordStoreError
from datastore.http import error_response, store_error_response
from pos.serializers import CheckoutInputSerializer, CheckoutResultSerializer
from pos.services.cart import CartSession, OutOfStock, fill_cart
from products.services.catalog import get_products_by_ids
from sales.services.checkout_orchestrator import checkout_cart
from sales.services.exceptions import (
    CheckoutError,
    EmptyCart,
    InsufficientPayment,
    MissingCustomer,
    PartialCommit,
    PersistenceError,
)


def checkout_error_response(exc):
    """Checkout / cart / store failure -> stable error code + status."""
    if isinstance(exc, EmptyCart):
        return error_response(code="empty_cart", message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, MissingCustomer):
        return error_response(
            code="missing_customer",
            message=str(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, InsufficientPayment):
        return error_response(
            code="insufficient_payment",
            message=str(exc),
            http_status=status.HTTP_400_BAD_REQUEST,
            total_amount=exc.total,
            amount_paid=exc.tendered,
        )
    if isinstance(exc, OutOfStock):
        return error_response(
            code="out_of_stock",
            message=str(exc),
            http_status=status.HTTP_409_CONFLICT,
            product_id=exc.product_id,
        )
    if isinstance(exc, PartialCommit):
        return error_response(
            code="partial_commit",
            message=str(exc),
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            transaction_id=exc.transaction_id,
        )
    if isinstance(exc, PersistenceError):
        return error_response(
            code="persistence_error",
            message=str(exc),
            http_status=status.HTTP_502_BAD_GATEWAY,
        )
    if isinstance(exc, RecordStoreError):
        return store_error_response(exc)
    return error_response(
        code="checkout_failed",
        message=str(exc),
        http_status=status.HTTP_400_BAD_REQUEST,
    )


def _requested_quantities(items) -> dict[int, int]:
    """Merge duplicate product lines, keeping first-seen order."""
    out: dict[int, int] = {}
    for item in items:
        pid = int(item["product_id"])
        out[pid] = out.get(pid, 0) + int(item["quantity"])
    return out


class CheckoutView(APIView):
    @extend_schema(
        request=CheckoutInputSerializer,
        responses={201: CheckoutResultSerializer},
        description="Commit a counter order as a sale and decrement stock.",
        examples=[
            OpenApiExample(
                "Cash, dine in",
                value={
                    "customer_name": "Budi",
                    "order_type": "Dine In",
                    "payment_method": "Cash",
                    "amount_paid": 30000,
                    "items": [
                        {"product_id": 1, "quantity": 2},
                        {"product_id": 2, "quantity": 1},
                    ],
                },
                request_only=True,
            ),
            OpenApiExample(
                "QRIS, paid exactly",
                value={
                    "customer_name": "Sari",
                    "order_type": "Take Away",
                    "payment_method": "QRIS",
                    "items": [{"product_id": 3, "quantity": 1}],
                },
                request_only=True,
            ),
        ],
    )
    def post(self, request):
        serializer = CheckoutInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        quantities = _requested_quantities(data["items"])
        customer_name = data.get("customer_name") or ""

        try:
            if not quantities:
                raise EmptyCart("Cart is empty")
            if not customer_name.strip():
                raise MissingCustomer("Customer name is required")

            products = get_products_by_ids(quantities.keys())
            missing = [pid for pid in quantities if pid not in products]
            if missing:
                return error_response(
                    code="product_not_found",
                    message=f"Unknown product id(s): {', '.join(map(str, missing))}",
                    http_status=status.HTTP_404_NOT_FOUND,
                    product_ids=missing,
                )

            cart = fill_cart(CartSession(), products=products, quantities=quantities)

            result = checkout_cart(
                cart=cart,
                customer_name=customer_name,
                order_type=data["order_type"],
                payment_method=data["payment_method"],
                amount_tendered=data.get("amount_paid"),
            )

        except (CheckoutError, OutOfStock, RecordStoreError) as exc:
            return checkout_error_response(exc)

        return Response(result.as_dict(), status=status.HTTP_201_CREATED)
