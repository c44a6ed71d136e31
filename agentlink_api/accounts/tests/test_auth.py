import pytest
from django.urls import reverse

pytestmark = pytest.mark.django_db


def test_obtain_token_with_email(api_client, poster):
    response = api_client.post(
        reverse('token-obtain-pair'),
        {'email': poster.email, 'password': 'pass1234'},
        format='json',
    )
    assert response.status_code == 200
    assert 'access' in response.data
    assert 'refresh' in response.data


def test_bearer_token_reaches_protected_views(api_client, poster):
    tokens = api_client.post(
        reverse('token-obtain-pair'),
        {'email': poster.email, 'password': 'pass1234'},
        format='json',
    ).data
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
    response = api_client.get(reverse('profile-retrieve'))
    assert response.status_code == 200
    assert response.data['email'] == poster.email


def test_wrong_password(api_client, poster):
    response = api_client.post(
        reverse('token-obtain-pair'),
        {'email': poster.email, 'password': 'nope'},
        format='json',
    )
    assert response.status_code == 401


def test_deactivated_account(api_client, poster):
    poster.is_active = False
    poster.save()
    response = api_client.post(
        reverse('token-obtain-pair'),
        {'email': poster.email, 'password': 'pass1234'},
        format='json',
    )
    assert response.status_code == 401


def test_refresh(api_client, poster):
    tokens = api_client.post(
        reverse('token-obtain-pair'),
        {'email': poster.email, 'password': 'pass1234'},
        format='json',
    ).data
    response = api_client.post(reverse('token-refresh'), {'refresh': tokens['refresh']}, format='json')
    assert response.status_code == 200
    assert 'access' in response.data


def test_create_user_requires_email(django_user_model):
    with pytest.raises(ValueError):
        django_user_model.objects.create_user(email='', password='pass1234')
