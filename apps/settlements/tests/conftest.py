import pytest
from datetime import date
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.events.models import Event, Participation, Contribution, ParticipantRole
from apps.expenses.models import Expense, ExpenseShare, ExpenseStatus


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
    return _make_user('alice@example.com', 'Alice')


@pytest.fixture
def bob(db):
    return _make_user('bob@example.com', 'Bob')


@pytest.fixture
def carol(db):
    return _make_user('carol@example.com', 'Carol')


@pytest.fixture
def dave(db):
    return _make_user('dave@example.com', 'Dave')


@pytest.fixture
def outsider(db):
    return _make_user('outsider@example.com', 'Outsider')


@pytest.fixture
def event(db, alice, bob, carol):
    """Event with Alice (owner), Bob and Carol, joined in that order."""
    event = Event.objects.create(
        name='Weekend Cabin',
        code='CABIN001',
        created_by=alice,
        currency='USD',
    )
    Participation.objects.create(user=alice, event=event, role=ParticipantRole.OWNER)
    Participation.objects.create(user=bob, event=event, role=ParticipantRole.PARTICIPANT)
    Participation.objects.create(user=carol, event=event, role=ParticipantRole.PARTICIPANT)
    return event


@pytest.fixture
def make_expense(db):
    """
    Factory writing an expense with explicit shares.

    ``shares`` maps user -> amount.
    """
    def _make(event, payer, amount, shares, status=ExpenseStatus.APPROVED):
        expense = Expense.objects.create(
            event=event,
            submitted_by=payer,
            amount=Decimal(amount),
            currency=event.currency,
            description='Shared cost',
            date=date(2024, 6, 1),
            status=status,
        )
        total = Decimal(amount)
        for user, share in shares.items():
            ExpenseShare.objects.create(
                expense=expense,
                user=user,
                amount=Decimal(share),
                percentage=(Decimal(share) / total * 100).quantize(Decimal('0.01')),
            )
        return expense
    return _make


@pytest.fixture
def make_contribution(db):
    def _make(event, user, amount):
        return Contribution.objects.create(
            event=event,
            user=user,
            amount=Decimal(amount),
            currency=event.currency,
        )
    return _make


@pytest.fixture
def dinner(event, alice, bob, carol, make_expense):
    """Alice paid 90, split equally: Alice +60, Bob -30, Carol -30."""
    return make_expense(event, alice, '90.00', {alice: '30.00', bob: '30.00', carol: '30.00'})


@pytest.fixture
def alice_client(alice):
    return _client_for(alice)


@pytest.fixture
def bob_client(bob):
    return _client_for(bob)


@pytest.fixture
def carol_client(carol):
    return _client_for(carol)


@pytest.fixture
def outsider_client(outsider):
    return _client_for(outsider)
