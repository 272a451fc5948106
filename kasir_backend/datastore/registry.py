# datastore/registry.py

"""
RECORD STORE REGISTRY

Purpose:
- Build the configured record store once per process and hand it out.
- settings.RECORD_STORE["BACKEND"]: "orm" (default) | "postgrest"

Config errors are NOT cached: the next call re-reads settings, so an operator
can fix the environment and the app recovers without a restart.
"""

from __future__ import annotations

import logging
import threading

from django.conf import settings

from datastore.base import RecordStore
from datastore.exceptions import ConfigurationError, ConfigurationInvalid

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_store: RecordStore | None = None


def _record_store_cfg() -> dict:
    cfg = getattr(settings, "RECORD_STORE", {}) or {}
    return cfg if isinstance(cfg, dict) else {}


def build_record_store(cfg: dict | None = None) -> RecordStore:
    cfg = _record_store_cfg() if cfg is None else cfg
    backend = str(cfg.get("BACKEND") or "orm").strip().lower()

    if backend == "orm":
        from datastore.orm import OrmRecordStore

        return OrmRecordStore()

    if backend in ("postgrest", "supabase"):
        from datastore.rest import PostgrestRecordStore

        return PostgrestRecordStore(
            url=cfg.get("SUPABASE_URL") or "",
            api_key=cfg.get("SUPABASE_ANON_KEY") or "",
            timeout=cfg.get("TIMEOUT"),
            notify_dsn=cfg.get("NOTIFY_DSN") or "",
        )

    raise ConfigurationInvalid(f"Unknown RECORD_STORE backend: {backend!r}")


def get_record_store() -> RecordStore:
    global _store
    if _store is not None:
        return _store

    with _lock:
        if _store is None:
            try:
                _store = build_record_store()
            except ConfigurationError as exc:
                logger.error("Record store is not configured: %s", exc)
                raise
            logger.info("Record store ready", extra={"backend": _store.name})
    return _store


def set_record_store(store: RecordStore | None) -> None:
    """Swap the process-wide store (tests, reconfiguration)."""
    global _store
    with _lock:
        _store = store


def reset_record_store() -> None:
    set_record_store(None)
