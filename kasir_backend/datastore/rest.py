# datastore/rest.py

"""
POSTGREST RECORD STORE (SUPABASE)

Purpose:
- Talk to the hosted Supabase/PostgREST API: /rest/v1/<table>.
- Every call commits independently (no multi-statement transactions), so the
  checkout journal is what detects a "transaction without items" state.

Relative stock decrement:
- PostgREST cannot express `stock = stock - n` in a PATCH, so we call the
  `decrement_stock` RPC (datastore/sql/decrement_stock.sql).

Change feed:
- PostgREST itself has no push channel. With SUPABASE_DB_URL set,
  subscribe() LISTENs on the Postgres triggers from sql/change_notify.sql
  (datastore/pg_notify.py). Without it, or when the database refuses the
  connection, subscribe() raises NotificationUnavailable and callers fall
  back to re-reading on demand.

Config errors:
- Missing URL/key -> ConfigurationMissing
- Malformed URL, HTTP 401/403 -> ConfigurationInvalid
"""

from __future__ import annotations

import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode, urlparse
from urllib.request import Request, urlopen

from django.utils.dateparse import parse_datetime

from datastore.base import (
    RecordStore,
    require_mutable,
    require_table,
    split_lookup,
)
from datastore.exceptions import (
    ConfigurationInvalid,
    ConfigurationMissing,
    ConstraintViolation,
    NotificationUnavailable,
    TransportError,
)

DATETIME_COLUMNS = ("timestamp",)


def _safe_preview(text: str, limit: int = 400) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _encode_value(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _encode_filters(filters: dict | None) -> list[tuple[str, str]]:
    """
    {"id": 3} -> [("id", "eq.3")]
    {"id__in": [1, 2]} -> [("id", "in.(1,2)")]
    """
    params = []
    for key, value in (filters or {}).items():
        column, lookup = split_lookup(key)
        if lookup == "in":
            items = ",".join(_encode_value(v) for v in value)
            params.append((column, f"in.({items})"))
        elif value is None:
            params.append((column, "is.null"))
        else:
            params.append((column, f"eq.{_encode_value(value)}"))
    return params


def _encode_order(order: str | None) -> str | None:
    if not order:
        return None
    if order.startswith("-"):
        return f"{order[1:]}.desc"
    return f"{order}.asc"


def _normalize_row(row: dict) -> dict:
    out = dict(row)
    for column in DATETIME_COLUMNS:
        raw = out.get(column)
        if isinstance(raw, str):
            out[column] = parse_datetime(raw) or raw
    return out


class PostgrestRecordStore(RecordStore):
    name = "postgrest"
    supports_transactions = False

    def __init__(self, *, url: str, api_key: str, timeout: float | None = None, notify_dsn: str = ""):
        url = (url or "").strip().rstrip("/")
        api_key = (api_key or "").strip()

        if not url or not api_key:
            raise ConfigurationMissing(
                "Supabase credentials missing. Set SUPABASE_URL and SUPABASE_ANON_KEY."
            )

        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationInvalid(f"SUPABASE_URL is not a valid http(s) URL: {url!r}")

        self.base_url = f"{url}/rest/v1"
        self._api_key = api_key
        self._timeout = timeout
        self._notify_dsn = (notify_dsn or "").strip()
        self._notifier = None

    # -----------------------------
    # HTTP
    # -----------------------------
    def _headers(self, *, prefer: str | None = None) -> dict:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> Any:
        url = f"{self.base_url}/{quote(path)}"
        if params:
            url = f"{url}?{urlencode(params, safe='(),.')}"

        data = None
        if body is not None:
            data = json.dumps(body, ensure_ascii=False, default=str).encode("utf-8")

        req = Request(url, data=data, headers=self._headers(prefer=prefer), method=method)

        kwargs = {}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            with urlopen(req, **kwargs) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            try:
                raw = e.read().decode("utf-8", errors="replace")
            except OSError:
                raw = ""
            self._raise_for_http_error(e.code, raw, path)
        except URLError as e:
            raise TransportError(f"Record store unreachable ({path}): {e.reason}") from e
        except OSError as e:
            raise TransportError(f"Record store request failed ({path}): {e}") from e

        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise TransportError(
                f"Record store returned non-JSON ({path}): {_safe_preview(raw)}"
            ) from e

    def _raise_for_http_error(self, status: int, raw: str, path: str):
        message = _safe_preview(raw)
        code = ""
        try:
            payload = json.loads(raw) if raw else {}
            if isinstance(payload, dict):
                code = str(payload.get("code") or "")
                message = payload.get("message") or message
        except ValueError:
            pass

        if status in (401, 403):
            raise ConfigurationInvalid(f"Record store rejected credentials ({status}): {message}")
        # Postgres class 23 = integrity constraint violation.
        if status == 409 or code.startswith("23"):
            raise ConstraintViolation(f"{path}: {message}")
        if status in (400, 422) and code.startswith("PGRST"):
            raise ConstraintViolation(f"{path}: {message}")
        raise TransportError(f"Record store HTTP {status} ({path}): {message}")

    # -----------------------------
    # WRITES
    # -----------------------------
    def insert(self, table: str, row: dict) -> dict:
        rows = self.insert_many(table, [row])
        if not rows:
            raise TransportError(f"{table}: insert returned no representation")
        return rows[0]

    def insert_many(self, table: str, rows) -> list[dict]:
        payload = list(rows)
        if not payload:
            return []
        result = self._request(
            "POST",
            require_table(table),
            body=payload,
            prefer="return=representation",
        )
        return [_normalize_row(r) for r in (result or [])]

    def update(self, table: str, filters: dict, patch: dict) -> int:
        result = self._request(
            "PATCH",
            require_mutable(table),
            params=_encode_filters(filters),
            body=patch,
            prefer="return=representation",
        )
        return len(result or [])

    def delete(self, table: str, filters: dict) -> int:
        result = self._request(
            "DELETE",
            require_mutable(table),
            params=_encode_filters(filters),
            prefer="return=representation",
        )
        return len(result or [])

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        result = self._request(
            "POST",
            "rpc/decrement_stock",
            body={"p_product_id": int(product_id), "p_quantity": int(quantity)},
        )
        try:
            return int(result or 0)
        except (TypeError, ValueError):
            return 0

    # -----------------------------
    # READS
    # -----------------------------
    def select(self, table: str, filters=None, *, order=None, limit=None, columns=None) -> list[dict]:
        params = [("select", ",".join(columns) if columns else "*")]
        params.extend(_encode_filters(filters))
        order_param = _encode_order(order)
        if order_param:
            params.append(("order", order_param))
        if limit is not None:
            params.append(("limit", str(int(limit))))

        result = self._request("GET", require_table(table), params=params)
        return [_normalize_row(r) for r in (result or [])]

    # -----------------------------
    # CHANGE FEED
    # -----------------------------
    def subscribe(self, tables, callback):
        if not self._notify_dsn:
            raise NotificationUnavailable(
                "SUPABASE_DB_URL not set; change feed needs a direct Postgres connection."
            )
        if self._notifier is None:
            from datastore.pg_notify import PgNotifyListener

            self._notifier = PgNotifyListener(self._notify_dsn)
        return self._notifier.subscribe(tables, callback)

