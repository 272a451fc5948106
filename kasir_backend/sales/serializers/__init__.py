# sales/serializers/__init__.py

from .transaction import (
    AnalyticsSerializer,
    DailySalesSerializer,
    TopProductSerializer,
    TransactionItemSerializer,
    TransactionSerializer,
)

__all__ = [
    "TransactionSerializer",
    "TransactionItemSerializer",
    "DailySalesSerializer",
    "TopProductSerializer",
    "AnalyticsSerializer",
]
