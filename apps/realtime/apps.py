from django.apps import AppConfig


class RealtimeConfig(AppConfig):
    name = 'apps.realtime'
    label = 'realtime'
    verbose_name = 'Realtime notifications'

    registry = None

    def ready(self):
        from .registry import ConnectionRegistry
        self.registry = ConnectionRegistry()

        # Connects the ledger signal receivers
        from . import receivers  # noqa: F401
