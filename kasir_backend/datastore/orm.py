# datastore/orm.py

"""
ORM RECORD STORE (LOCAL DJANGO DATABASE)

Purpose:
- Implement the record store protocol on top of the Django ORM.
- This backend exposes real multi-statement transactions, so checkout wraps
  "insert transaction + insert items" in one atomic() block.

Rules:
- Single-row writes go through Model.save() (full_clean + append-only guards
  + post_save signals).
- Stock decrements use F() expressions: the subtraction runs in SQL, so two
  terminals selling the same product cannot overwrite each other.
- Queryset updates bypass signals, so this store publishes them to the hub.
- Django/DB exceptions are translated into datastore.exceptions.
"""

from __future__ import annotations

from contextlib import contextmanager

from django.apps import apps
from django.core.exceptions import FieldError, ImproperlyConfigured, ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F

from datastore.base import (
    EVENT_UPDATE,
    TABLE_PRODUCTS,
    TABLE_TRANSACTION_ITEMS,
    TABLE_TRANSACTIONS,
    UNLIMITED_STOCK,
    RecordStore,
    Subscription,
    require_mutable,
    require_table,
)
from datastore.exceptions import (
    ConfigurationInvalid,
    ConstraintViolation,
    TransportError,
)
from datastore.notifications import hub

_MODEL_LABELS = {
    TABLE_PRODUCTS: ("products", "Product"),
    TABLE_TRANSACTIONS: ("sales", "Transaction"),
    TABLE_TRANSACTION_ITEMS: ("sales", "TransactionItem"),
}


@contextmanager
def _translate_errors(table: str):
    try:
        yield
    except (IntegrityError, ValidationError, FieldError, TypeError) as exc:
        raise ConstraintViolation(f"{table}: {exc}") from exc
    except ImproperlyConfigured as exc:
        raise ConfigurationInvalid(str(exc)) from exc
    except DatabaseError as exc:
        raise TransportError(f"{table}: {exc}") from exc


def _row(obj) -> dict:
    return {f.attname: getattr(obj, f.attname) for f in obj._meta.concrete_fields}


class OrmRecordStore(RecordStore):
    name = "orm"
    supports_transactions = True

    def __init__(self, *, change_hub=None):
        self._hub = change_hub or hub

    def _model(self, table: str):
        app_label, model_name = _MODEL_LABELS[require_table(table)]
        return apps.get_model(app_label, model_name)

    # -----------------------------
    # WRITES
    # -----------------------------
    def insert(self, table: str, row: dict) -> dict:
        model = self._model(table)
        with _translate_errors(table):
            with transaction.atomic():
                obj = model.objects.create(**row)
        return _row(obj)

    def insert_many(self, table: str, rows) -> list[dict]:
        model = self._model(table)
        created = []
        with _translate_errors(table):
            with transaction.atomic():
                for row in rows:
                    created.append(model.objects.create(**row))
        return [_row(obj) for obj in created]

    def update(self, table: str, filters: dict, patch: dict) -> int:
        model = self._model(require_mutable(table))
        with _translate_errors(table):
            with transaction.atomic():
                count = 0
                for obj in model.objects.select_for_update().filter(**filters):
                    for key, value in patch.items():
                        setattr(obj, key, value)
                    obj.save()
                    count += 1
        return count

    def delete(self, table: str, filters: dict) -> int:
        model = self._model(require_mutable(table))
        with _translate_errors(table):
            with transaction.atomic():
                deleted, _ = model.objects.filter(**filters).delete()
        return deleted

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        model = self._model(TABLE_PRODUCTS)
        with _translate_errors(TABLE_PRODUCTS):
            with transaction.atomic():
                count = (
                    model.objects.filter(id=product_id)
                    .exclude(stock=UNLIMITED_STOCK)
                    .update(stock=F("stock") - int(quantity))
                )
        if count:
            self._hub.publish(TABLE_PRODUCTS, EVENT_UPDATE)
        return count

    # -----------------------------
    # READS
    # -----------------------------
    def select(self, table: str, filters=None, *, order=None, limit=None, columns=None) -> list[dict]:
        model = self._model(table)
        with _translate_errors(table):
            qs = model.objects.filter(**(filters or {}))
            if order:
                qs = qs.order_by(order)
            qs = qs.values(*(columns or ()))
            if limit is not None:
                qs = qs[: int(limit)]
            return [dict(row) for row in qs]

    # -----------------------------
    # CHANGE FEED + TRANSACTIONS
    # -----------------------------
    def subscribe(self, tables, callback) -> Subscription:
        return self._hub.subscribe(tables, callback)

    @contextmanager
    def atomic(self):
        with transaction.atomic():
            yield self
