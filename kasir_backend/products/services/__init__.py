from .catalog import (
    ProductNotFoundError,
    create_product,
    delete_product,
    fetch_products,
    filter_products,
    get_catalog_snapshot,
    get_products_by_ids,
    list_categories,
    refresh_catalog_snapshot,
    update_product,
)

__all__ = [
    "ProductNotFoundError",
    "create_product",
    "delete_product",
    "fetch_products",
    "filter_products",
    "get_catalog_snapshot",
    "get_products_by_ids",
    "list_categories",
    "refresh_catalog_snapshot",
    "update_product",
]
