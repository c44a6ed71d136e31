import pytest
from django.urls import reverse

from payments.models import Transaction

pytestmark = pytest.mark.django_db


@pytest.fixture
def completed_job(checked_out_job, poster, service):
    return service.complete(checked_out_job.pk, poster)


def test_balance(api_client, completed_job, claimer):
    api_client.force_authenticate(user=claimer)
    response = api_client.get(reverse('balance'))
    assert response.status_code == 200
    assert response.data['available_balance'] == '80.00'


def test_transactions_are_scoped_to_caller(api_client, completed_job, claimer, other_agent):
    api_client.force_authenticate(user=claimer)
    response = api_client.get(reverse('transaction-list'))
    assert [item['type'] for item in response.data['results']] == [Transaction.ESCROW_RELEASE]

    api_client.force_authenticate(user=other_agent)
    response = api_client.get(reverse('transaction-list'))
    assert response.data['count'] == 0


def test_transactions_filter_by_type(api_client, completed_job, poster):
    api_client.force_authenticate(user=poster)
    response = api_client.get(reverse('transaction-list'), {'type': Transaction.PLATFORM_FEE})
    assert [item['amount'] for item in response.data['results']] == ['20.00']


def test_payout(api_client, completed_job, claimer):
    api_client.force_authenticate(user=claimer)
    response = api_client.post(reverse('payout'), {'amount': '30.00'}, format='json')
    assert response.status_code == 201
    assert response.data['type'] == Transaction.PAYOUT

    balance = api_client.get(reverse('balance'))
    assert balance.data['available_balance'] == '50.00'


def test_payout_over_balance(api_client, completed_job, claimer):
    api_client.force_authenticate(user=claimer)
    response = api_client.post(reverse('payout'), {'amount': '80.01'}, format='json')
    assert response.status_code == 400
    assert response.data['detail'].code == 'insufficient_balance'


def test_payout_amount_must_be_positive(api_client, claimer):
    api_client.force_authenticate(user=claimer)
    response = api_client.post(reverse('payout'), {'amount': '0.00'}, format='json')
    assert response.status_code == 400
