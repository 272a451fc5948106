# sales/services/change_feed.py

"""
CHANGE FEED LISTENER

Purpose:
- React to "(table, event_kind) changed" notifications from the record store.
- products      -> full catalog re-read
- transactions  -> full history re-read + analytics recompute
- anything else -> ignored

Rules:
- Every event is only a cache-invalidation signal: handlers always re-fetch
  complete snapshots and never apply deltas, so duplicate or out-of-order
  events cost an extra read, never wrong state.
- on_event() is reentrant and never raises; handler failures are logged.
- A failed subscription is non-fatal: start() returns False and viewers fall
  back to refresh-on-read (snapshots are rebuilt on cache miss and expire
  after settings.SNAPSHOT_TTL, so sales from other terminals show up).
"""

from __future__ import annotations

import logging
import threading

from datastore.base import TABLE_PRODUCTS, TABLE_TRANSACTIONS
from datastore.exceptions import ConfigurationError, NotificationUnavailable
from datastore.registry import get_record_store

logger = logging.getLogger(__name__)

TOPICS = (TABLE_PRODUCTS, TABLE_TRANSACTIONS)


def _refresh_catalog(store):
    from products.services.catalog import refresh_catalog_snapshot

    refresh_catalog_snapshot(store=store)


def _refresh_sales(store):
    from sales.services.analytics import refresh_analytics_snapshot
    from sales.services.history import refresh_history_snapshot

    refresh_history_snapshot(store=store)
    refresh_analytics_snapshot(store=store)


class ChangeFeedListener:
    def __init__(self, *, store=None):
        self._store = store
        self._subscription = None
        self._lock = threading.Lock()
        self.handlers = {
            TABLE_PRODUCTS: _refresh_catalog,
            TABLE_TRANSACTIONS: _refresh_sales,
        }

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None and not self._subscription.closed

    def _resolve_store(self):
        return self._store if self._store is not None else get_record_store()

    def start(self) -> bool:
        with self._lock:
            if self.is_subscribed:
                return True
            try:
                self._subscription = self._resolve_store().subscribe(TOPICS, self.on_event)
            except (NotificationUnavailable, ConfigurationError) as exc:
                logger.warning("Change feed unavailable, using refresh-on-read: %s", exc)
                self._subscription = None
                return False

        logger.info("Change feed subscribed", extra={"topics": list(TOPICS)})
        return True

    def stop(self) -> None:
        with self._lock:
            sub, self._subscription = self._subscription, None
        if sub is not None:
            sub.close()

    def on_event(self, table: str, event_kind: str) -> None:
        handler = self.handlers.get(table)
        if handler is None:
            return

        try:
            handler(self._resolve_store())
        except Exception:
            logger.exception(
                "Change feed refresh failed",
                extra={"table": table, "event_kind": event_kind},
            )


_listener: ChangeFeedListener | None = None
_listener_lock = threading.Lock()


def get_change_feed() -> ChangeFeedListener:
    global _listener
    with _listener_lock:
        if _listener is None:
            _listener = ChangeFeedListener()
        return _listener
