import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.events.models import Event, Participation, ParticipantRole


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def event_owner(db):
    """Create and return the event owner."""
    return User.objects.create_user(
        email='owner@example.com',
        password='TestPass123!',
        display_name='Event Owner',
    )


@pytest.fixture
def participant_user(db):
    """Create and return a regular participant."""
    return User.objects.create_user(
        email='participant@example.com',
        password='TestPass123!',
        display_name='Participant',
    )


@pytest.fixture
def outsider(db):
    """Create and return a user not in any event."""
    return User.objects.create_user(
        email='outsider@example.com',
        password='TestPass123!',
        display_name='Outsider',
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def owner_client(event_owner):
    """Return API client authenticated as event owner."""
    return _client_for(event_owner)


@pytest.fixture
def participant_client(participant_user):
    """Return API client authenticated as participant."""
    return _client_for(participant_user)


@pytest.fixture
def outsider_client(outsider):
    """Return API client authenticated as non-participant."""
    return _client_for(outsider)


@pytest.fixture
def event(db, event_owner):
    """Create and return a test event with owner participation."""
    event = Event.objects.create(
        name='Ski Trip',
        description='Annual ski trip',
        code='SKITRIP1',
        created_by=event_owner,
        currency='EUR',
    )
    Participation.objects.create(
        user=event_owner,
        event=event,
        role=ParticipantRole.OWNER,
    )
    return event


@pytest.fixture
def event_with_participant(event, participant_user):
    """Event with owner and one participant."""
    Participation.objects.create(
        user=participant_user,
        event=event,
        role=ParticipantRole.PARTICIPANT,
    )
    return event
