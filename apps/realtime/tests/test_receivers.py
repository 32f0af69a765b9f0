import pytest
from datetime import date
from decimal import Decimal

from apps.events.services import add_contribution
from apps.expenses.services import create_expense, review_expense
from apps.settlements.services import generate_settlements, complete_settlement


@pytest.mark.django_db
class TestLedgerNotifications:

    def test_contribution_added(self, registry, connection, event, bob, django_capture_on_commit_callbacks):
        registry.register(event_id=event.id, user_id=bob.id, connection=connection)

        with django_capture_on_commit_callbacks(execute=True):
            add_contribution(event_id=event.id, user=bob, amount=Decimal('40.00'))

        [message] = connection.messages
        assert message['type'] == 'contribution_added'
        assert message['event_id'] == str(event.id)
        assert message['user_id'] == str(bob.id)
        assert message['data']['amount'] == '40.00'
        assert message['timestamp']

    def test_nothing_sent_before_commit(self, registry, connection, event, bob, django_capture_on_commit_callbacks):
        registry.register(event_id=event.id, user_id=bob.id, connection=connection)

        with django_capture_on_commit_callbacks(execute=False) as callbacks:
            add_contribution(event_id=event.id, user=bob, amount=Decimal('40.00'))

        assert connection.messages == []
        assert len(callbacks) == 1

    def test_expense_lifecycle(self, registry, connection, event, alice, bob, django_capture_on_commit_callbacks):
        registry.register(event_id=event.id, user_id=alice.id, connection=connection)

        with django_capture_on_commit_callbacks(execute=True):
            expense = create_expense(
                event_id=event.id,
                submitter=bob,
                amount=Decimal('60.00'),
                description='Tickets',
                date=date(2024, 7, 1),
            )
            review_expense(expense_id=expense.id, reviewer=alice, action='approve')

        assert [m['type'] for m in connection.messages] == ['expense_added', 'expense_approved']

    def test_settlement_messages(self, registry, connection, event, alice, bob, django_capture_on_commit_callbacks):
        registry.register(event_id=event.id, user_id=alice.id, connection=connection)
        with django_capture_on_commit_callbacks(execute=True):
            expense = create_expense(
                event_id=event.id,
                submitter=alice,
                amount=Decimal('50.00'),
                description='Camping spot',
                date=date(2024, 7, 2),
            )
        connection.messages.clear()

        with django_capture_on_commit_callbacks(execute=True):
            [settlement] = generate_settlements(event_id=event.id)
        with django_capture_on_commit_callbacks(execute=True):
            complete_settlement(settlement_id=settlement.id, payment_reference='CASH')

        generated, completed = connection.messages
        assert generated['type'] == 'settlements_generated'
        assert generated['user_id'] is None
        assert generated['data'][0]['amount'] == '25.00'
        assert completed['type'] == 'settlement_completed'
        assert completed['user_id'] == str(bob.id)
        assert expense.status == 'approved'

    def test_broken_observer_does_not_fail_operation(
        self, registry, broken_connection, event, bob, django_capture_on_commit_callbacks
    ):
        registry.register(event_id=event.id, user_id=bob.id, connection=broken_connection)

        with django_capture_on_commit_callbacks(execute=True):
            contribution = add_contribution(event_id=event.id, user=bob, amount=Decimal('5.00'))

        assert contribution.pk is not None
        assert registry.connection_count(event.id) == 0
