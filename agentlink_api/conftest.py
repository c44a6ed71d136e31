"""
Pytest fixtures shared by the accounts, jobs, escrow and payments test suites.
"""
import math
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from jobs.geofence import EARTH_RADIUS_FEET
from jobs.services import JobService
from payments.providers import BasePaymentProvider

PROPERTY_LAT = 30.2672
PROPERTY_LNG = -97.7431


def north_of(latitude, longitude, feet):
    """A point ``feet`` due north of the given one."""
    return latitude + math.degrees(feet / EARTH_RADIUS_FEET), longitude


class FakeProvider(BasePaymentProvider):
    """
    In-memory stand-in for the card processor.

    Holds start in ``requires_payment_method`` until ``authorize`` simulates
    the poster finishing checkout. ``fail`` makes the next call to a method
    return an error result.
    """

    name = 'fake'

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.intents = {}
        self.calls = []
        self.failures = {}

    def fail(self, method, retryable=True):
        self.failures[method] = {
            'status': 'error',
            'message': f'{method} failed',
            'error': 'simulated failure',
            'retryable': retryable,
        }

    def authorize(self, reference):
        self.intents[reference]['status'] = 'requires_capture'

    def _intent_result(self, reference):
        intent = self.intents[reference]
        return {
            'status': 'success',
            'reference': reference,
            'intent_status': intent['status'],
            'client_secret': f'{reference}_secret',
            'provider': self.name,
        }

    def create_hold(self, amount, payer, idempotency_key, **kwargs):
        self.calls.append(('create_hold', idempotency_key))
        if 'create_hold' in self.failures:
            return self.failures.pop('create_hold')
        reference = f'pi_{idempotency_key}'
        self.intents.setdefault(reference, {'status': 'requires_payment_method', 'amount': amount})
        return self._intent_result(reference)

    def retrieve_hold(self, reference):
        self.calls.append(('retrieve_hold', reference))
        if 'retrieve_hold' in self.failures:
            return self.failures.pop('retrieve_hold')
        return self._intent_result(reference)

    def capture(self, reference, idempotency_key):
        self.calls.append(('capture', idempotency_key))
        if 'capture' in self.failures:
            return self.failures.pop('capture')
        intent = self.intents[reference]
        if intent['status'] == 'requires_capture':
            intent['status'] = 'succeeded'
        return {
            'status': 'success',
            'reference': reference,
            'intent_status': intent['status'],
            'settled': intent['status'] == 'succeeded',
        }

    def void_or_refund(self, reference):
        self.calls.append(('void_or_refund', reference))
        if 'void_or_refund' in self.failures:
            return self.failures.pop('void_or_refund')
        intent = self.intents[reference]
        if intent['status'] == 'succeeded':
            intent['status'] = 'refunded'
            return {'status': 'success', 'action': 'refunded', 'refund_id': f're_{reference}', 'reference': reference}
        intent['status'] = 'canceled'
        return {'status': 'success', 'action': 'voided', 'reference': reference}


@pytest.fixture(autouse=True)
def provider(monkeypatch):
    """Every PaymentService built during a test talks to the same fake processor."""
    fake = FakeProvider()
    monkeypatch.setattr('payments.services.get_payment_provider', lambda name, **kwargs: fake)
    return fake


@pytest.fixture
def poster(django_user_model):
    return django_user_model.objects.create_user(
        email='listing@example.com', password='pass1234', first_name='Lena', last_name='Lister',
    )


@pytest.fixture
def claimer(django_user_model):
    return django_user_model.objects.create_user(
        email='covering@example.com', password='pass1234', first_name='Cole', last_name='Cover',
    )


@pytest.fixture
def other_agent(django_user_model):
    return django_user_model.objects.create_user(
        email='other@example.com', password='pass1234', first_name='Otto', last_name='Other',
    )


@pytest.fixture
def service():
    return JobService()


@pytest.fixture
def make_job(poster, service):
    def _make_job(fee=Decimal('100.00'), owner=None, latitude=PROPERTY_LAT, longitude=PROPERTY_LNG, **overrides):
        details = {
            'property_address': '100 Congress Ave, Austin, TX',
            'property_type': 'showing',
            'scheduled_date': timezone.now() + timedelta(days=1),
            'scheduled_time': '2:00 PM - 4:00 PM',
            'duration_minutes': 120,
            'property_latitude': Decimal(str(latitude)) if latitude is not None else None,
            'property_longitude': Decimal(str(longitude)) if longitude is not None else None,
        }
        details.update(overrides)
        return service.create_job(poster=owner or poster, fee=fee, **details)
    return _make_job


@pytest.fixture
def job(make_job):
    return make_job()


@pytest.fixture
def claimed_job(job, claimer, service):
    return service.claim(job.pk, claimer)


@pytest.fixture
def funded_job(claimed_job, poster, service, provider):
    provider.authorize(claimed_job.external_payment_reference)
    return service.confirm_payment(claimed_job.pk, poster)


@pytest.fixture
def checked_in_job(funded_job, claimer, service):
    result = service.check_in(funded_job.pk, claimer, PROPERTY_LAT, PROPERTY_LNG)
    return result.job


@pytest.fixture
def checked_out_job(checked_in_job, claimer, service):
    result = service.check_out(checked_in_job.pk, claimer, PROPERTY_LAT, PROPERTY_LNG)
    return result.job


@pytest.fixture
def api_client():
    return APIClient()
