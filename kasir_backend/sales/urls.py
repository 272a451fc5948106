# sales/urls.py

"""
SALES URLS

Provides:
    GET /api/sales/history/
    GET /api/sales/analytics/

Checkout lives under /api/pos/checkout/.
"""

from django.urls import path

from sales.views.history import SalesAnalyticsView, SalesHistoryView

urlpatterns = [
    path("history/", SalesHistoryView.as_view(), name="sales-history"),
    path("analytics/", SalesAnalyticsView.as_view(), name="sales-analytics"),
]
