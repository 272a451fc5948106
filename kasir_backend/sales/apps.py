# sales/apps.py

"""
SALES APP CONFIG

On startup (CHANGE_FEED_ENABLED=True) the change feed listener subscribes to
products / transactions notifications. A failed subscription only logs: the
app keeps serving and snapshots are rebuilt on read.
"""

from django.apps import AppConfig
from django.conf import settings


class SalesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sales"
    verbose_name = "Sales"

    def ready(self):
        if not getattr(settings, "CHANGE_FEED_ENABLED", False):
            return

        from sales.services.change_feed import get_change_feed

        get_change_feed().start()
