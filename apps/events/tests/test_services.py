import uuid
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.test import override_settings

from apps.events.models import Event, Participation, Contribution, ParticipantRole
from apps.events.services import (
    create_event,
    get_event_by_id,
    update_event,
    get_event_summary,
    join_event,
    get_event_participants,
    get_participant_ids,
    require_participant,
    add_contribution,
    get_event_contributions,
    EventNotFoundError,
    InvalidEventCodeError,
    AlreadyParticipantError,
    NotParticipantError,
    UnsupportedCurrencyError,
    InvalidAmountError,
    InsufficientPermissionsError,
    InvalidEventStatusError,
)
from apps.events.signals import contribution_added
from apps.expenses.models import Expense, ExpenseStatus


@pytest.mark.django_db
class TestCreateEvent:

    def test_creates_event_with_owner(self, event_owner):
        event = create_event(name='Flat', creator=event_owner, currency='eur')

        assert event.currency == 'EUR'
        assert len(event.code) == 8
        assert event.code == event.code.upper()
        assert event.get_user_role(event_owner) == ParticipantRole.OWNER

    def test_defaults_to_configured_currency(self, event_owner):
        with override_settings(DEFAULT_CURRENCY='CZK'):
            event = create_event(name='Flat', creator=event_owner)

        assert event.currency == 'CZK'

    def test_rejects_unsupported_currency(self, event_owner):
        with pytest.raises(UnsupportedCurrencyError):
            create_event(name='Flat', creator=event_owner, currency='XYZ')

        assert not Event.objects.exists()

    def test_retries_on_code_collision(self, event, event_owner):
        codes = iter([event.code, 'NEWCODE2'])

        with patch(
            'apps.events.services.event_management.generate_event_code',
            side_effect=lambda: next(codes)
        ):
            created = create_event(name='Second', creator=event_owner, currency='USD')

        assert created.code == 'NEWCODE2'
        assert Event.objects.count() == 2

    def test_gives_up_after_max_retries(self, event, event_owner):
        with patch(
            'apps.events.services.event_management.generate_event_code',
            return_value=event.code
        ):
            with pytest.raises(RuntimeError):
                create_event(name='Second', creator=event_owner, currency='USD', max_retries=2)

    def test_get_event_by_id_missing(self):
        with pytest.raises(EventNotFoundError):
            get_event_by_id(event_id=uuid.uuid4())


@pytest.mark.django_db
class TestJoinEvent:

    def test_join_with_lowercase_code(self, event, participant_user):
        participation = join_event(code='skitrip1', user=participant_user)

        assert participation.role == ParticipantRole.PARTICIPANT
        assert event.has_participant(participant_user)

    def test_invalid_code(self, event, participant_user):
        with pytest.raises(InvalidEventCodeError):
            join_event(code='NOPE0000', user=participant_user)

    def test_already_participant(self, event, event_owner):
        with pytest.raises(AlreadyParticipantError):
            join_event(code=event.code, user=event_owner)


@pytest.mark.django_db
class TestParticipantLookup:

    def test_participants_in_join_order(self, event_with_participant, event_owner, participant_user):
        ids = get_participant_ids(event_id=event_with_participant.id)

        assert ids == [event_owner.id, participant_user.id]
        assert get_event_participants(event_id=event_with_participant.id).count() == 2

    def test_unknown_event_has_no_participants(self):
        assert get_participant_ids(event_id=uuid.uuid4()) == []

    def test_require_participant(self, event, outsider):
        require_participant(event_id=event.id, user=event.created_by)

        with pytest.raises(NotParticipantError):
            require_participant(event_id=event.id, user=outsider)


@pytest.mark.django_db
class TestAddContribution:

    def test_adds_contribution_in_event_currency(self, event, event_owner):
        contribution = add_contribution(
            event_id=event.id,
            user=event_owner,
            amount=Decimal('50.00'),
            notes='Fuel money'
        )

        assert contribution.currency == 'EUR'
        assert contribution.amount == Decimal('50.00')
        assert list(get_event_contributions(event_id=event.id)) == [contribution]

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5.00')])
    def test_rejects_non_positive_amount(self, event, event_owner, amount):
        with pytest.raises(InvalidAmountError):
            add_contribution(event_id=event.id, user=event_owner, amount=amount)

        assert not Contribution.objects.exists()

    def test_requires_participant(self, event, outsider):
        with pytest.raises(NotParticipantError):
            add_contribution(event_id=event.id, user=outsider, amount=Decimal('10'))

    def test_emits_signal_on_commit(self, event, event_owner, django_capture_on_commit_callbacks):
        received = []

        def receiver(sender, **kwargs):
            received.append(kwargs)

        contribution_added.connect(receiver)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                contribution = add_contribution(
                    event_id=event.id, user=event_owner, amount=Decimal('12.50')
                )
        finally:
            contribution_added.disconnect(receiver)

        assert len(received) == 1
        assert received[0]['event_id'] == event.id
        assert received[0]['user_id'] == event_owner.id
        assert received[0]['contribution'] == contribution

    def test_failing_receiver_does_not_break_contribution(
        self, event, event_owner, django_capture_on_commit_callbacks
    ):
        def broken(sender, **kwargs):
            raise RuntimeError('observer down')

        contribution_added.connect(broken)
        try:
            with django_capture_on_commit_callbacks(execute=True):
                add_contribution(event_id=event.id, user=event_owner, amount=Decimal('1.00'))
        finally:
            contribution_added.disconnect(broken)

        assert Contribution.objects.count() == 1


@pytest.mark.django_db
class TestUpdateEvent:

    def test_owner_updates_approval_settings(self, event, event_owner):
        updated = update_event(
            event_id=event.id,
            user=event_owner,
            require_approval=False,
            auto_approval_limit=Decimal('50.00')
        )

        event.refresh_from_db()
        assert updated.require_approval is False
        assert event.require_approval is False
        assert event.auto_approval_limit == Decimal('50.00')
        assert event.name == 'Ski Trip'

    def test_only_given_fields_change(self, event, event_owner):
        update_event(event_id=event.id, user=event_owner, name='Ski Week')

        event.refresh_from_db()
        assert event.name == 'Ski Week'
        assert event.description == 'Annual ski trip'
        assert event.require_approval is True

    def test_participant_cannot_update(self, event_with_participant, participant_user):
        with pytest.raises(InsufficientPermissionsError):
            update_event(event_id=event_with_participant.id, user=participant_user, name='Mine now')

    def test_negative_limit(self, event, event_owner):
        with pytest.raises(InvalidAmountError):
            update_event(event_id=event.id, user=event_owner, auto_approval_limit=Decimal('-1'))

    def test_unknown_status(self, event, event_owner):
        with pytest.raises(InvalidEventStatusError):
            update_event(event_id=event.id, user=event_owner, status='deleted')

    def test_unknown_event(self, event_owner):
        with pytest.raises(EventNotFoundError):
            update_event(event_id=uuid.uuid4(), user=event_owner, name='X')


@pytest.mark.django_db
class TestEventSummary:

    def _expense(self, event, user, amount, status):
        return Expense.objects.create(
            event=event,
            submitted_by=user,
            amount=Decimal(amount),
            currency=event.currency,
            description='Lift passes',
            date=date(2024, 2, 1),
            status=status,
        )

    def test_counts_and_totals(self, event_with_participant, event_owner, participant_user):
        event = event_with_participant
        Contribution.objects.create(event=event, user=event_owner, amount=Decimal('100.00'), currency='EUR')
        self._expense(event, participant_user, '40.00', ExpenseStatus.PENDING)
        self._expense(event, event_owner, '25.00', ExpenseStatus.APPROVED)
        self._expense(event, event_owner, '99.00', ExpenseStatus.REJECTED)

        summary = get_event_summary(event_id=event.id)

        assert summary['event'] == event
        assert summary['participant_count'] == 2
        assert summary['pending_expenses'] == 1
        assert summary['total_contributions'] == Decimal('100.00')
        assert summary['total_expenses'] == Decimal('65.00')
        assert len(summary['recent_activity']) == 4

    def test_recent_activity_newest_first_and_limited(self, event, event_owner):
        for amount in ['1.00', '2.00', '3.00']:
            Contribution.objects.create(event=event, user=event_owner, amount=Decimal(amount), currency='EUR')
        self._expense(event, event_owner, '4.00', ExpenseStatus.PENDING)

        activity = get_event_summary(event_id=event.id, activity_limit=2)['recent_activity']

        assert [item['type'] for item in activity] == ['expense', 'contribution']
        assert activity[1]['amount'] == Decimal('3.00')

    def test_empty_event(self, event):
        summary = get_event_summary(event_id=event.id)

        assert summary['total_contributions'] == Decimal('0.00')
        assert summary['total_expenses'] == Decimal('0.00')
        assert summary['recent_activity'] == []

    def test_unknown_event(self):
        with pytest.raises(EventNotFoundError):
            get_event_summary(event_id=uuid.uuid4())
