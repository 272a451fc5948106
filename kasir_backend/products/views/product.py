# products/views/product.py

"""
PRODUCT VIEWS

Purpose:
- Counter catalog (search + category filter) served from the catalog snapshot.
- Inventory management: create / edit / delete through the record store.
- Category list for the filter chips ("All" first).

Key rule alignment:
- Reads come from the snapshot (refreshed by the change feed or on miss).
- Writes invalidate the snapshot so the next read re-fetches.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from datastore.exceptions import RecordStoreError
from datastore.http import error_response, store_error_response
from products.serializers.product import ProductQuerySerializer, ProductSerializer
from products.services.catalog import (
    ProductNotFoundError,
    create_product,
    delete_product,
    filter_products,
    get_catalog_snapshot,
    list_categories,
    update_product,
)


def _not_found(exc: ProductNotFoundError):
    return error_response(
        code="product_not_found",
        message=str(exc),
        http_status=status.HTTP_404_NOT_FOUND,
    )


class ProductListCreateView(APIView):
    """
    GET  /api/products/?q=<search>&category=<name|All>
    POST /api/products/
    """

    @extend_schema(
        parameters=[ProductQuerySerializer],
        responses={200: ProductSerializer(many=True)},
        description="Catalog ordered by name, filtered by name search and category",
    )
    def get(self, request):
        try:
            products = get_catalog_snapshot()
        except RecordStoreError as exc:
            return store_error_response(exc)

        products = filter_products(
            products,
            search=request.query_params.get("q", ""),
            category=request.query_params.get("category"),
        )
        return Response(ProductSerializer(products, many=True).data)

    @extend_schema(
        request=ProductSerializer,
        responses={201: ProductSerializer},
        description="Create a product (stock -1 = unlimited)",
    )
    def post(self, request):
        serializer = ProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            row = create_product(data=serializer.validated_data)
        except RecordStoreError as exc:
            return store_error_response(exc)

        return Response(ProductSerializer(row).data, status=status.HTTP_201_CREATED)


class ProductDetailView(APIView):
    """
    PATCH  /api/products/<id>/
    DELETE /api/products/<id>/
    """

    @extend_schema(
        request=ProductSerializer,
        responses={200: ProductSerializer},
        description="Edit product fields (partial)",
    )
    def patch(self, request, product_id: int):
        serializer = ProductSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            row = update_product(product_id, data=serializer.validated_data)
        except ProductNotFoundError as exc:
            return _not_found(exc)
        except RecordStoreError as exc:
            return store_error_response(exc)

        return Response(ProductSerializer(row).data)

    @extend_schema(responses={204: None}, description="Delete a product")
    def delete(self, request, product_id: int):
        try:
            delete_product(product_id)
        except ProductNotFoundError as exc:
            return _not_found(exc)
        except RecordStoreError as exc:
            return store_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)


class CategoryListView(APIView):
    @extend_schema(
        responses={200: {"type": "array", "items": {"type": "string"}}},
        description='Distinct categories in catalog order, "All" first',
    )
    def get(self, request):
        try:
            products = get_catalog_snapshot()
        except RecordStoreError as exc:
            return store_error_response(exc)

        return Response(list_categories(products))
