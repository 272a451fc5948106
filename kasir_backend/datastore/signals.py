# datastore/signals.py

"""
MODEL SIGNALS -> CHANGE HUB

Covers every ORM path that saves/deletes single rows (record store, admin,
management commands). Queryset.update() does not send signals; the ORM
record store publishes those itself.
"""

from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from datastore.base import EVENT_DELETE, EVENT_INSERT, EVENT_UPDATE, TABLES
from datastore.notifications import hub


def _table_of(sender) -> str | None:
    table = getattr(getattr(sender, "_meta", None), "db_table", None)
    return table if table in TABLES else None


@receiver(post_save, dispatch_uid="datastore_post_save")
def _on_post_save(sender, instance, created, raw=False, **kwargs):
    table = _table_of(sender)
    if table is None or raw:
        return
    hub.publish(table, EVENT_INSERT if created else EVENT_UPDATE)


@receiver(post_delete, dispatch_uid="datastore_post_delete")
def _on_post_delete(sender, instance, **kwargs):
    table = _table_of(sender)
    if table is None:
        return
    hub.publish(table, EVENT_DELETE)
