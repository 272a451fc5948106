# sales/views/history.py

"""
SALES HISTORY + ANALYTICS VIEWS

GET /api/sales/history/    -> latest transactions with items (newest first)
GET /api/sales/analytics/  -> daily sales series + top products

Both are served from the snapshots the change feed keeps fresh; a cache miss
(feed unavailable, first request) re-reads through the record store.
?refresh=1 forces a re-read (manual refresh when the feed is down).
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from datastore.exceptions import RecordStoreError
from datastore.http import store_error_response
from sales.serializers import AnalyticsSerializer, TransactionSerializer
from sales.services.analytics import get_analytics_snapshot, refresh_analytics_snapshot
from sales.services.history import get_history_snapshot, refresh_history_snapshot

REFRESH_PARAM = OpenApiParameter(
    name="refresh",
    type=OpenApiTypes.BOOL,
    location=OpenApiParameter.QUERY,
    required=False,
    description="Bypass the snapshot and re-read from the record store",
)


def _wants_refresh(request) -> bool:
    return str(request.query_params.get("refresh", "")).lower() in ("1", "true", "yes")


class SalesHistoryView(APIView):
    @extend_schema(parameters=[REFRESH_PARAM], responses={200: TransactionSerializer(many=True)})
    def get(self, request):
        try:
            if _wants_refresh(request):
                history = refresh_history_snapshot()
            else:
                history = get_history_snapshot()
        except RecordStoreError as exc:
            return store_error_response(exc)

        return Response(TransactionSerializer(history, many=True).data)


class SalesAnalyticsView(APIView):
    @extend_schema(parameters=[REFRESH_PARAM], responses={200: AnalyticsSerializer})
    def get(self, request):
        try:
            if _wants_refresh(request):
                analytics = refresh_analytics_snapshot()
            else:
                analytics = get_analytics_snapshot()
        except RecordStoreError as exc:
            return store_error_response(exc)

        return Response(AnalyticsSerializer(analytics).data)
