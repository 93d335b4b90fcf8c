from django.apps import AppConfig
from django.db.backends.signals import connection_created

from pastes.conf import get_setting


def enable_sqlite_wal(sender, connection, **kwargs):
    """Let SQLite readers run alongside the single writer."""
    if connection.vendor == "sqlite":
        with connection.cursor() as cursor:
            cursor.execute("PRAGMA journal_mode=WAL;")


class PastesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pastes"
    verbose_name = "Pastes"

    def ready(self):
        from pastes.store import Store

        connection_created.connect(enable_sqlite_wal, dispatch_uid="pastes.enable_sqlite_wal")

        # Default store handed to the views; queried lazily
        self.store = Store(bucket=get_setting("BUCKET"))

    def make_reaper(self):
        """Build a reaper for the default store from the ``PASTES`` settings."""
        from pastes.reaper import Reaper

        return Reaper(
            self.store,
            interval=get_setting("REAPER_INTERVAL"),
            grace=get_setting("REAPER_GRACE"),
        )
