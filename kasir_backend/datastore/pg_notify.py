# datastore/pg_notify.py

"""
POSTGRES LISTEN/NOTIFY CHANGE FEED (SUPABASE BACKEND)

Purpose:
- Give the PostgREST backend the same (table, event_kind) change feed the
  ORM backend gets from model signals.
- Triggers from datastore/sql/change_notify.sql publish
  "<table>:<INSERT|UPDATE|DELETE>" on the kasir_changes channel; one
  background thread per process LISTENs and fans events out via a ChangeHub.

Rules:
- Connecting happens inside subscribe(): a refused / unreachable database is
  NotificationUnavailable right there, so the listener can degrade to
  refresh-on-read.
- The listener thread starts with the first subscription and stops when the
  last one is closed.
- A dropped connection ends the thread (logged); the next subscribe()
  reconnects.
- Payloads for unknown tables or malformed payloads are ignored.
"""

from __future__ import annotations

import logging
import threading

import psycopg
from psycopg import sql

from datastore.base import EVENT_DELETE, EVENT_INSERT, EVENT_UPDATE, TABLES, Subscription
from datastore.exceptions import NotificationUnavailable
from datastore.notifications import ChangeHub

logger = logging.getLogger(__name__)

CHANGE_CHANNEL = "kasir_changes"
EVENT_KINDS = (EVENT_INSERT, EVENT_UPDATE, EVENT_DELETE)


def parse_payload(payload: str) -> tuple[str, str] | None:
    """
    "products:UPDATE" -> ("products", "UPDATE"); anything else -> None.
    """
    table, _, event_kind = (payload or "").strip().partition(":")
    event_kind = event_kind.upper()
    if table not in TABLES or event_kind not in EVENT_KINDS:
        return None
    return table, event_kind


class PgNotifyListener:
    def __init__(self, dsn: str, *, channel: str = CHANGE_CHANNEL, poll_interval: float = 1.0, connect=None):
        self.dsn = dsn
        self.channel = channel
        self.poll_interval = poll_interval
        self.hub = ChangeHub()
        self._connect = connect or psycopg.connect
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def subscribe(self, tables, callback) -> Subscription:
        self._ensure_running()
        return self.hub.subscribe(tables, callback, on_close=self._release)

    def _release(self, sub: Subscription) -> None:
        self.hub._remove(sub)
        if self.hub.subscriber_count == 0:
            self.stop()

    def _ensure_running(self) -> None:
        with self._lock:
            if self.is_running:
                return
            try:
                conn = self._connect(self.dsn, autocommit=True)
            except psycopg.Error as exc:
                raise NotificationUnavailable(f"Cannot connect for {self.channel}: {exc}") from exc
            try:
                conn.execute(sql.SQL("LISTEN {}").format(sql.Identifier(self.channel)))
            except psycopg.Error as exc:
                conn.close()
                raise NotificationUnavailable(f"Cannot LISTEN on {self.channel}: {exc}") from exc

            self._stop.clear()
            self._thread = threading.Thread(
                target=self._run,
                args=(conn,),
                name="kasir-pg-notify",
                daemon=True,
            )
            self._thread.start()

        logger.info("Listening for store changes", extra={"channel": self.channel})

    def _run(self, conn) -> None:
        try:
            while not self._stop.is_set():
                for notify in conn.notifies(timeout=self.poll_interval):
                    self.dispatch(notify.payload)
                    if self._stop.is_set():
                        break
        except psycopg.Error:
            logger.exception("Change feed connection lost", extra={"channel": self.channel})
        finally:
            conn.close()

    def dispatch(self, payload: str) -> None:
        parsed = parse_payload(payload)
        if parsed is None:
            logger.debug("Ignoring change payload %r", payload)
            return
        self.hub.deliver(*parsed)

    def stop(self, timeout: float | None = None) -> None:
        with self._lock:
            thread, self._thread = self._thread, None
        self._stop.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout if timeout is not None else self.poll_interval * 2)
