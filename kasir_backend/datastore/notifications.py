# datastore/notifications.py

"""
IN-PROCESS CHANGE HUB

Purpose:
- Fan out (table, event_kind) notifications to subscribers.
- ORM backend: fed by model signals (datastore/signals.py) and by bulk ORM writes that
  bypass signals (queryset update / F() decrements).

Rules:
- Delivery happens AFTER the surrounding DB transaction commits, so a
  subscriber that re-reads always sees the committed rows.
- A failing subscriber never blocks the others.
"""

from __future__ import annotations

import logging
import threading

from django.db import transaction

from datastore.base import ChangeCallback, Subscription, require_table

logger = logging.getLogger(__name__)


class ChangeHub:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []

    def subscribe(self, tables, callback: ChangeCallback, *, on_close=None) -> Subscription:
        names = tuple(require_table(t) for t in tables)
        sub = Subscription(tables=names, callback=callback, _on_close=on_close or self._remove)
        with self._lock:
            self._subscriptions.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, table: str, event_kind: str) -> None:
        transaction.on_commit(lambda: self.deliver(table, event_kind))

    def deliver(self, table: str, event_kind: str) -> None:
        with self._lock:
            targets = [s for s in self._subscriptions if table in s.tables and not s.closed]

        for sub in targets:
            try:
                sub.callback(table, event_kind)
            except Exception:
                logger.exception(
                    "Change subscriber failed",
                    extra={"table": table, "event_kind": event_kind},
                )


hub = ChangeHub()
