import pytest
from django.urls import reverse
from rest_framework import status
from apps.expenses.models import Expense, ExpenseStatus


def expense_payload(event, **overrides):
    payload = {
        'event': str(event.id),
        'amount': '90.00',
        'description': 'Groceries',
        'date': '2024-05-01',
    }
    payload.update(overrides)
    return payload


@pytest.mark.django_db
class TestExpenseCreate:
    """Tests for POST /api/expenses/"""

    def test_equal_split(self, bob_client, event):
        url = reverse('expenses:expense-list')
        response = bob_client.post(url, expense_payload(event), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == ExpenseStatus.PENDING
        assert sorted(s['amount'] for s in response.data['shares']) == ['30.00', '30.00', '30.00']

    def test_custom_split(self, bob_client, event, alice, bob):
        url = reverse('expenses:expense-list')
        payload = expense_payload(event, split_type='custom', participants=[
            {'user_id': str(alice.id), 'amount': '60.00'},
            {'user_id': str(bob.id), 'amount': '30.00'},
        ])
        response = bob_client.post(url, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        shares = {s['user']['id']: s['percentage'] for s in response.data['shares']}
        assert shares[str(alice.id)] == '66.67'

    def test_split_error(self, bob_client, event, alice, bob):
        url = reverse('expenses:expense-list')
        payload = expense_payload(event, split_type='custom', participants=[
            {'user_id': str(alice.id), 'amount': '10.00'},
        ])
        response = bob_client.post(url, payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data
        assert not Expense.objects.exists()

    def test_outsider_forbidden(self, outsider_client, event):
        url = reverse('expenses:expense-list')
        response = outsider_client.post(url, expense_payload(event), format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unauthenticated(self, api_client, event):
        url = reverse('expenses:expense-list')
        response = api_client.post(url, expense_payload(event), format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestExpenseList:
    """Tests for GET /api/expenses/?event=<id>"""

    def test_requires_event(self, bob_client):
        response = bob_client.get(reverse('expenses:expense-list'))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_and_filter(self, alice_client, bob_client, event):
        url = reverse('expenses:expense-list')
        alice_client.post(url, expense_payload(event, description='Fuel'), format='json')
        bob_client.post(url, expense_payload(event, description='Snacks'), format='json')

        response = bob_client.get(url, {'event': str(event.id)})
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 2

        response = bob_client.get(url, {'event': str(event.id), 'status': 'pending'})
        assert [e['description'] for e in response.data] == ['Snacks']

    def test_outsider_forbidden(self, outsider_client, event):
        response = outsider_client.get(reverse('expenses:expense-list'), {'event': str(event.id)})

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestExpenseReviewAndDelete:

    def _submit(self, client, event):
        response = client.post(reverse('expenses:expense-list'), expense_payload(event), format='json')
        return response.data['id']

    def test_owner_rejects(self, alice_client, bob_client, event):
        expense_id = self._submit(bob_client, event)
        url = reverse('expenses:expense-review', args=[expense_id])

        response = alice_client.post(url, {'action': 'reject'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        response = alice_client.post(url, {'action': 'reject', 'rejection_reason': 'Personal'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == ExpenseStatus.REJECTED

    def test_participant_cannot_review(self, bob_client, event):
        expense_id = self._submit(bob_client, event)
        url = reverse('expenses:expense-review', args=[expense_id])

        response = bob_client.post(url, {'action': 'approve'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_delete_pending(self, bob_client, event):
        expense_id = self._submit(bob_client, event)

        response = bob_client.delete(reverse('expenses:expense-detail', args=[expense_id]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Expense.objects.exists()

    def test_retrieve(self, bob_client, outsider_client, event):
        expense_id = self._submit(bob_client, event)
        url = reverse('expenses:expense-detail', args=[expense_id])

        assert bob_client.get(url).status_code == status.HTTP_200_OK
        assert outsider_client.get(url).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestExpenseUpdate:
    """Tests for PATCH /api/expenses/{id}/"""

    def _submit(self, client, event):
        response = client.post(reverse('expenses:expense-list'), expense_payload(event), format='json')
        return response.data['id']

    def test_submitter_changes_amount(self, bob_client, event):
        expense_id = self._submit(bob_client, event)
        url = reverse('expenses:expense-detail', args=[expense_id])

        response = bob_client.patch(url, {'amount': '120.00', 'vendor': 'Market'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '120.00'
        assert response.data['vendor'] == 'Market'
        assert sorted(s['amount'] for s in response.data['shares']) == ['40.00', '40.00', '40.00']

    def test_split_error(self, bob_client, event, alice):
        expense_id = self._submit(bob_client, event)
        url = reverse('expenses:expense-detail', args=[expense_id])

        response = bob_client.patch(url, {
            'split_type': 'custom',
            'participants': [{'user_id': str(alice.id), 'amount': '1.00'}],
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Expense.objects.get(id=expense_id).amount == 90

    def test_other_participant_forbidden(self, alice_client, bob_client, event):
        expense_id = self._submit(bob_client, event)
        url = reverse('expenses:expense-detail', args=[expense_id])

        response = alice_client.patch(url, {'description': 'Edited'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reviewed_expense(self, alice_client, bob_client, event):
        expense_id = self._submit(bob_client, event)
        alice_client.post(
            reverse('expenses:expense-review', args=[expense_id]), {'action': 'approve'}, format='json'
        )

        response = bob_client.patch(
            reverse('expenses:expense-detail', args=[expense_id]), {'notes': 'late'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCategories:

    def test_list_categories(self, bob_client, category):
        response = bob_client.get(reverse('expenses:expense-categories'))

        assert response.status_code == status.HTTP_200_OK
        assert [c['name'] for c in response.data] == ['Food & Dining']
