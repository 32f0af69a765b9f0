import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.events.models import Event, Participation, ParticipantRole
from apps.expenses.models import ExpenseCategory


def _make_user(email, name):
    return User.objects.create_user(email=email, password='TestPass123!', display_name=name)


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def alice(db):
    """Event owner."""
    return _make_user('alice@example.com', 'Alice')


@pytest.fixture
def bob(db):
    return _make_user('bob@example.com', 'Bob')


@pytest.fixture
def carol(db):
    return _make_user('carol@example.com', 'Carol')


@pytest.fixture
def outsider(db):
    return _make_user('outsider@example.com', 'Outsider')


@pytest.fixture
def event(db, alice, bob, carol):
    """Event requiring approval with Alice (owner), Bob and Carol (participants)."""
    event = Event.objects.create(
        name='Road Trip',
        code='ROADTRP1',
        created_by=alice,
        currency='USD',
        require_approval=True,
    )
    Participation.objects.create(user=alice, event=event, role=ParticipantRole.OWNER)
    Participation.objects.create(user=bob, event=event, role=ParticipantRole.PARTICIPANT)
    Participation.objects.create(user=carol, event=event, role=ParticipantRole.PARTICIPANT)
    return event


@pytest.fixture
def category(db):
    return ExpenseCategory.objects.create(name='Food & Dining', icon='F')


@pytest.fixture
def alice_client(alice):
    return _client_for(alice)


@pytest.fixture
def bob_client(bob):
    return _client_for(bob)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)
