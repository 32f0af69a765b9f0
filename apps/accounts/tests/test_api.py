import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User


@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        data = {
            'email': 'new@example.com',
            'password': 'Str0ngPass!234',
            'password_confirm': 'Str0ngPass!234',
            'display_name': 'Newbie',
        }
        response = api_client.post(reverse('accounts:register'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['user']['display_name'] == 'Newbie'
        assert 'access' in response.data['tokens']
        assert User.objects.get(email='new@example.com').check_password('Str0ngPass!234')

    def test_register_duplicate_email(self, api_client, user):
        data = {
            'email': 'TestUser@example.com',
            'password': 'Str0ngPass!234',
            'password_confirm': 'Str0ngPass!234',
        }
        response = api_client.post(reverse('accounts:register'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'already exists' in response.data['error']

    def test_register_password_mismatch(self, api_client):
        data = {
            'email': 'new@example.com',
            'password': 'Str0ngPass!234',
            'password_confirm': 'Different!234',
        }
        response = api_client.post(reverse('accounts:register'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data


@pytest.mark.django_db
class TestTokens:
    """Tests for POST /api/auth/token/ and /api/auth/token/refresh/"""

    def test_obtain_and_refresh(self, api_client, user):
        response = api_client.post(
            reverse('accounts:token-obtain'),
            {'email': 'testuser@example.com', 'password': 'TestPass123!'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        refreshed = api_client.post(
            reverse('accounts:token-refresh'),
            {'refresh': response.data['refresh']},
            format='json'
        )
        assert refreshed.status_code == status.HTTP_200_OK
        assert 'access' in refreshed.data

    def test_wrong_password(self, api_client, user):
        response = api_client.post(
            reverse('accounts:token-obtain'),
            {'email': 'testuser@example.com', 'password': 'nope'},
            format='json'
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestCurrentUser:
    """Tests for GET/PATCH /api/auth/me/"""

    def test_get(self, authenticated_client, user):
        response = authenticated_client.get(reverse('accounts:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email

    def test_update_display_name(self, authenticated_client, user):
        response = authenticated_client.patch(
            reverse('accounts:current-user'),
            {'display_name': 'Renamed', 'email': 'hijack@example.com'},
            format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.display_name == 'Renamed'
        assert user.email == 'testuser@example.com'

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('accounts:current-user'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
