# datastore/apps.py

"""
DATASTORE APP CONFIG

Record store gateway:
- Protocol used by checkout / catalog / analytics against the durable store
- ORM backend (local Django database) + Supabase/PostgREST backend
- Change notifications for products / transactions tables
"""

from django.apps import AppConfig


class DatastoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "datastore"
    verbose_name = "Record Store"

    def ready(self):
        # Connect model signals -> change notifications (ORM backend).
        from datastore import signals  # noqa: F401
