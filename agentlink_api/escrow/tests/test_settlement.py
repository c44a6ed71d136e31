from decimal import Decimal

import pytest

from escrow.exceptions import InsufficientBalance, PaymentNotReady
from escrow.services import EscrowSettlement, capture_idempotency_key, hold_idempotency_key
from payments.ledger import Ledger
from payments.models import Transaction

pytestmark = pytest.mark.django_db


@pytest.fixture
def settlement():
    return EscrowSettlement()


@pytest.fixture
def completed_job(checked_out_job, poster, service):
    return service.complete(checked_out_job.pk, poster)


def test_idempotency_keys_follow_claim_generation(claimed_job):
    assert hold_idempotency_key(claimed_job) == f'job-{claimed_job.pk}-hold-1'
    assert capture_idempotency_key(claimed_job) == f'job-{claimed_job.pk}-capture-1'


def test_open_hold_twice_records_one_entry(claimed_job, settlement):
    settlement.open_hold(claimed_job)
    assert Transaction.objects.filter(job=claimed_job, type=Transaction.ESCROW_HOLD).count() == 1


def test_confirm_hold_without_reference(job, settlement):
    with pytest.raises(PaymentNotReady):
        settlement.confirm_hold(job)


@pytest.mark.parametrize('intent_status', ['requires_capture', 'succeeded', 'processing'])
def test_confirm_hold_accepts_capturable_states(claimed_job, settlement, provider, intent_status):
    provider.intents[claimed_job.external_payment_reference]['status'] = intent_status
    assert settlement.confirm_hold(claimed_job) == intent_status


def test_capture_and_split_is_idempotent(completed_job, settlement, provider):
    calls_before = len(provider.calls)
    assert settlement.capture_and_split(completed_job) is None
    assert len(provider.calls) == calls_before


def test_capture_not_settled_records_nothing(funded_job, settlement, provider):
    provider.intents[funded_job.external_payment_reference]['status'] = 'processing'
    with pytest.raises(PaymentNotReady):
        settlement.capture_and_split(funded_job)
    assert not Transaction.objects.filter(job=funded_job, type=Transaction.ESCROW_RELEASE).exists()


def test_refund_after_capture(completed_job, settlement, poster):
    action = settlement.void_or_refund(completed_job)
    assert action == 'refunded'
    refund = Transaction.objects.get(job=completed_job, type=Transaction.REFUND)
    assert refund.amount == Decimal('100.00')
    assert refund.payee == poster
    assert refund.status == Transaction.COMPLETED


def test_void_without_hold_is_a_no_op(job, settlement, provider):
    assert settlement.void_or_refund(job) is None
    assert provider.calls == []


class TestPayout:

    def test_balance_after_completion(self, completed_job, claimer, poster):
        ledger = Ledger()
        assert ledger.available_balance(claimer) == Decimal('80.00')
        assert ledger.available_balance(poster) == Decimal('0.00')

    def test_payout_reduces_balance(self, completed_job, claimer, settlement):
        entry = settlement.payout(claimer, Decimal('50.00'))
        assert entry.type == Transaction.PAYOUT
        assert entry.payer == claimer
        assert entry.status == Transaction.COMPLETED
        assert entry.external_reference.startswith('payout-')
        assert Ledger().available_balance(claimer) == Decimal('30.00')

    def test_full_balance_can_be_withdrawn(self, completed_job, claimer, settlement):
        settlement.payout(claimer, Decimal('80.00'))
        assert Ledger().available_balance(claimer) == Decimal('0.00')

    def test_overdraw_is_refused(self, completed_job, claimer, settlement):
        with pytest.raises(InsufficientBalance):
            settlement.payout(claimer, Decimal('80.01'))
        assert not Transaction.objects.filter(type=Transaction.PAYOUT).exists()

    def test_repeated_payouts_never_go_negative(self, completed_job, claimer, settlement):
        settlement.payout(claimer, Decimal('60.00'))
        with pytest.raises(InsufficientBalance):
            settlement.payout(claimer, Decimal('60.00'))
        assert Ledger().available_balance(claimer) == Decimal('20.00')

    def test_user_without_earnings(self, other_agent, settlement):
        with pytest.raises(InsufficientBalance):
            settlement.payout(other_agent, Decimal('1.00'))

    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5.00')])
    def test_non_positive_amount(self, completed_job, claimer, settlement, amount):
        with pytest.raises(InsufficientBalance):
            settlement.payout(claimer, amount)

    def test_uncompleted_jobs_do_not_count(self, checked_out_job, claimer):
        assert Ledger().available_balance(claimer) == Decimal('0.00')
