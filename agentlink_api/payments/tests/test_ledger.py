from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from payments.ledger import Ledger
from payments.models import Transaction

pytestmark = pytest.mark.django_db


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def hold(ledger, job, poster):
    return ledger.record(
        type=Transaction.ESCROW_HOLD,
        amount=Decimal('100.00'),
        status=Transaction.HELD,
        job=job,
        payer=poster,
        external_reference='pi_test',
    )


def test_record_sets_settled_at_only_for_terminal_status(ledger, hold, claimer, job):
    assert hold.settled_at is None
    release = ledger.record(
        type=Transaction.ESCROW_RELEASE, amount=Decimal('80.00'), status=Transaction.COMPLETED,
        job=job, payee=claimer,
    )
    assert release.settled_at is not None


def test_entries_cannot_be_edited(hold):
    hold.amount = Decimal('1.00')
    with pytest.raises(ValueError):
        hold.save()
    hold.refresh_from_db()
    assert hold.amount == Decimal('100.00')


def test_entries_cannot_be_deleted(hold):
    with pytest.raises(ValueError):
        hold.delete()
    assert Transaction.objects.filter(pk=hold.pk).exists()


def test_settle_moves_open_entry_once(ledger, hold):
    assert ledger.settle(hold, Transaction.COMPLETED) is True
    assert ledger.settle(hold, Transaction.REFUNDED) is False
    hold.refresh_from_db()
    assert hold.status == Transaction.COMPLETED
    assert hold.settled_at is not None


def test_settle_rejects_non_terminal_status(ledger, hold):
    with pytest.raises(ValueError):
        ledger.settle(hold, Transaction.PENDING)


def test_open_hold_lookup(ledger, hold, job):
    assert ledger.open_hold_for(job, 'pi_test') == hold
    assert ledger.open_hold_for(job, 'pi_other') is None
    ledger.settle(hold, Transaction.FAILED)
    assert ledger.open_hold_for(job, 'pi_test') is None


def test_one_release_per_job(ledger, job, claimer):
    ledger.record(type=Transaction.ESCROW_RELEASE, amount=Decimal('80.00'), status=Transaction.COMPLETED, job=job, payee=claimer)
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            ledger.record(type=Transaction.ESCROW_RELEASE, amount=Decimal('80.00'), status=Transaction.COMPLETED, job=job, payee=claimer)
    assert ledger.has_settlement(job)


def test_refunds_are_not_limited_per_job(ledger, job, poster):
    for _ in range(2):
        ledger.record(type=Transaction.REFUND, amount=Decimal('10.00'), status=Transaction.COMPLETED, job=job, payee=poster)
    assert Transaction.objects.filter(job=job, type=Transaction.REFUND).count() == 2


def test_negative_amount_is_rejected(ledger, poster):
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            ledger.record(type=Transaction.PAYOUT, amount=Decimal('-1.00'), status=Transaction.COMPLETED, payer=poster)


def test_balance_only_counts_completed_entries(ledger, job, claimer):
    ledger.record(type=Transaction.ESCROW_RELEASE, amount=Decimal('80.00'), status=Transaction.PENDING, job=job, payee=claimer)
    assert ledger.available_balance(claimer) == Decimal('0.00')


def test_balance_subtracts_payouts(ledger, job, claimer):
    ledger.record(type=Transaction.ESCROW_RELEASE, amount=Decimal('80.00'), status=Transaction.COMPLETED, job=job, payee=claimer)
    ledger.record(type=Transaction.PAYOUT, amount=Decimal('25.50'), status=Transaction.COMPLETED, payer=claimer)
    ledger.record(type=Transaction.PAYOUT, amount=Decimal('10.00'), status=Transaction.FAILED, payer=claimer)
    assert ledger.available_balance(claimer) == Decimal('54.50')


def test_entries_for_user(ledger, hold, poster, claimer, other_agent):
    assert list(ledger.entries_for_user(poster)) == [hold]
    assert list(ledger.entries_for_user(other_agent)) == []
