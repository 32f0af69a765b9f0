import uuid

from django.apps import apps as django_apps

from apps.realtime.receivers import get_registry
from apps.realtime.registry import ConnectionRegistry


EVENT = uuid.uuid4()
OTHER_EVENT = uuid.uuid4()
ALICE = uuid.uuid4()
BOB = uuid.uuid4()


class TestConnectionRegistry:

    def test_broadcast_reaches_event_connections(self, connection, other_connection):
        registry = ConnectionRegistry()
        elsewhere = other_connection
        registry.register(event_id=EVENT, user_id=ALICE, connection=connection)
        registry.register(event_id=OTHER_EVENT, user_id=BOB, connection=elsewhere)

        delivered = registry.broadcast(event_id=EVENT, message={'type': 'ping'})

        assert delivered == 1
        assert connection.messages == [{'type': 'ping'}]
        assert elsewhere.messages == []

    def test_broadcast_without_connections(self):
        registry = ConnectionRegistry()

        assert registry.broadcast(event_id=EVENT, message={'type': 'ping'}) == 0

    def test_failed_send_unregisters(self, connection, broken_connection):
        registry = ConnectionRegistry()
        registry.register(event_id=EVENT, user_id=ALICE, connection=broken_connection)
        registry.register(event_id=EVENT, user_id=BOB, connection=connection)

        delivered = registry.broadcast(event_id=EVENT, message={'type': 'ping'})

        assert delivered == 1
        assert registry.connection_count(EVENT) == 1

        registry.broadcast(event_id=EVENT, message={'type': 'ping'})
        assert broken_connection.attempts == 1
        assert len(connection.messages) == 2

    def test_register_replaces(self, connection, other_connection):
        registry = ConnectionRegistry()
        old = other_connection
        registry.register(event_id=EVENT, user_id=ALICE, connection=old)
        registry.register(event_id=EVENT, user_id=ALICE, connection=connection)

        registry.broadcast(event_id=EVENT, message={'type': 'hello'})

        assert registry.connection_count() == 1
        assert old.messages == []
        assert connection.messages == [{'type': 'hello'}]

    def test_unregister_keeps_newer_connection(self, connection, other_connection):
        registry = ConnectionRegistry()
        old = other_connection
        registry.register(event_id=EVENT, user_id=ALICE, connection=connection)

        assert registry.unregister(event_id=EVENT, user_id=ALICE, connection=old) is False
        assert registry.connection_count(EVENT) == 1
        assert registry.unregister(event_id=EVENT, user_id=ALICE) is True
        assert registry.connection_count(EVENT) == 0


class TestAppRegistry:

    def test_created_by_app_config(self):
        app_registry = django_apps.get_app_config('realtime').registry

        assert isinstance(app_registry, ConnectionRegistry)
        assert get_registry() is app_registry

    def test_receivers_follow_installed_registry(self, registry):
        assert get_registry() is registry
