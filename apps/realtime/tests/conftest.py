import pytest
from django.apps import apps as django_apps
from apps.accounts.models import User
from apps.events.models import Event, Participation, ParticipantRole
from apps.realtime.registry import ConnectionRegistry


class RecordingConnection:
    """Connection double that keeps every message it was sent."""

    def __init__(self):
        self.messages = []

    def send(self, message):
        self.messages.append(message)


class BrokenConnection:

    def __init__(self):
        self.attempts = 0

    def send(self, message):
        self.attempts += 1
        raise ConnectionResetError('peer went away')


@pytest.fixture
def connection():
    return RecordingConnection()


@pytest.fixture
def other_connection():
    return RecordingConnection()


@pytest.fixture
def broken_connection():
    return BrokenConnection()


@pytest.fixture
def registry(monkeypatch):
    """Fresh registry installed on the realtime app config."""
    fresh = ConnectionRegistry()
    monkeypatch.setattr(django_apps.get_app_config('realtime'), 'registry', fresh)
    return fresh


@pytest.fixture
def alice(db):
    return User.objects.create_user(email='alice@example.com', password='TestPass123!', display_name='Alice')


@pytest.fixture
def bob(db):
    return User.objects.create_user(email='bob@example.com', password='TestPass123!', display_name='Bob')


@pytest.fixture
def event(db, alice, bob):
    event = Event.objects.create(
        name='Festival',
        code='FESTVL01',
        created_by=alice,
        currency='EUR',
        require_approval=True,
    )
    Participation.objects.create(user=alice, event=event, role=ParticipantRole.OWNER)
    Participation.objects.create(user=bob, event=event, role=ParticipantRole.PARTICIPANT)
    return event
