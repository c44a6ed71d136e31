import logging
import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction

from payments.ledger import Ledger
from payments.models import Transaction
from payments.providers import HOLD_CAPTURABLE_STATUSES
from payments.services import PaymentService

from .exceptions import InsufficientBalance, PaymentNotReady
from .fees import round2

logger = logging.getLogger(__name__)

User = get_user_model()


def hold_idempotency_key(job):
    return f'job-{job.pk}-hold-{job.claim_generation}'


def capture_idempotency_key(job):
    return f'job-{job.pk}-capture-{job.claim_generation}'


class EscrowSettlement:
    """
    Turns job lifecycle events into processor calls and ledger entries.

    Ledger rows are written only after the processor call has succeeded. Callers
    run these methods inside the same ``transaction.atomic()`` block as the job
    status change, so a failure anywhere rolls the whole operation back.
    """

    def __init__(self, payment_service=None, ledger=None):
        self.payment_service = payment_service or PaymentService()
        self.ledger = ledger or Ledger()

    def open_hold(self, job):
        """
        Ask the processor for a manual-capture hold of ``job.fee`` from the poster.
        Returns the processor result; ``reference`` is to be stored on the job.
        """
        result = self.payment_service.create_hold(
            amount=job.fee,
            payer=job.poster,
            idempotency_key=hold_idempotency_key(job),
            job_id=job.pk,
            platform_fee=job.platform_fee_amount,
            payout_amount=job.payout_amount,
            description=f"Escrow hold for job {job.pk} at {job.property_address}",
        )
        reference = result['reference']

        # A retried claim gets the same hold back from the processor.
        if self.ledger.open_hold_for(job, reference) is None:
            self.ledger.record(
                type=Transaction.ESCROW_HOLD,
                amount=job.fee,
                status=Transaction.HELD,
                job=job,
                payer=job.poster,
                platform_fee_amount=job.platform_fee_amount,
                net_amount=job.payout_amount,
                external_reference=reference,
            )

        logger.info(f"Escrow hold {reference} opened for job {job.pk}, amount {job.fee}")
        return result

    def confirm_hold(self, job):
        """Verify the poster finished checkout. Raises PaymentNotReady otherwise."""
        if not job.external_payment_reference:
            raise PaymentNotReady("No payment hold exists for this job.")

        result = self.payment_service.retrieve_hold(reference=job.external_payment_reference)
        intent_status = result['intent_status']
        if intent_status not in HOLD_CAPTURABLE_STATUSES:
            logger.warning(f"Hold {job.external_payment_reference} for job {job.pk} not ready: {intent_status}")
            raise PaymentNotReady(f"Payment hold is {intent_status}.")

        logger.info(f"Escrow hold {job.external_payment_reference} confirmed for job {job.pk} ({intent_status})")
        return intent_status

    def client_secret(self, job):
        if not job.external_payment_reference:
            raise PaymentNotReady("No payment hold exists for this job.")
        result = self.payment_service.retrieve_hold(reference=job.external_payment_reference)
        return result.get('client_secret')

    def capture_and_split(self, job):
        """
        Capture the hold and record the claimer's release and the platform fee.
        Safe to call twice: an existing settlement is returned untouched.
        """
        if self.ledger.has_settlement(job):
            logger.warning(f"Job {job.pk} already settled; capture skipped")
            return None

        if not job.escrow_held or not job.external_payment_reference:
            raise PaymentNotReady("Escrow is not funded for this job.")

        result = self.payment_service.capture(
            reference=job.external_payment_reference,
            idempotency_key=capture_idempotency_key(job),
        )
        if not result.get('settled'):
            raise PaymentNotReady(f"Capture is {result.get('intent_status', 'pending')}.")

        hold = self.ledger.open_hold_for(job, job.external_payment_reference)
        if hold is not None:
            self.ledger.settle(hold, Transaction.COMPLETED)

        release = self.ledger.record(
            type=Transaction.ESCROW_RELEASE,
            amount=job.payout_amount,
            status=Transaction.COMPLETED,
            job=job,
            payer=job.poster,
            payee=job.claimer,
            platform_fee_amount=job.platform_fee_amount,
            net_amount=job.payout_amount,
            external_reference=job.external_payment_reference,
        )
        platform_fee = self.ledger.record(
            type=Transaction.PLATFORM_FEE,
            amount=job.platform_fee_amount,
            status=Transaction.COMPLETED,
            job=job,
            payer=job.poster,
            external_reference=job.external_payment_reference,
        )

        logger.info(
            f"Job {job.pk} settled: {job.payout_amount} to user {job.claimer_id}, "
            f"{job.platform_fee_amount} platform fee"
        )
        return release, platform_fee

    def void_or_refund(self, job):
        """
        Release the poster's money. Returns ``voided``, ``refunded`` or None when
        no hold was ever opened.
        """
        reference = job.external_payment_reference
        if not reference:
            return None

        result = self.payment_service.void_or_refund(reference=reference)
        action = result['action']
        hold = self.ledger.open_hold_for(job, reference)

        if action == 'refunded':
            if hold is not None:
                self.ledger.settle(hold, Transaction.REFUNDED)
            self.ledger.record(
                type=Transaction.REFUND,
                amount=job.fee,
                status=Transaction.COMPLETED,
                job=job,
                payee=job.poster,
                external_reference=result.get('refund_id') or f'refund-{reference}',
                description=f"Refund of escrow for job {job.pk}",
            )
        elif hold is not None:
            # Funds were authorized but never captured: the hold is returned.
            self.ledger.settle(hold, Transaction.REFUNDED if job.escrow_held else Transaction.FAILED)

        logger.info(f"Escrow hold {reference} for job {job.pk} {action}")
        return action

    def payout(self, user, amount):
        """Withdraw from the user's available balance. Returns the payout entry."""
        amount = round2(amount)
        if amount <= Decimal('0'):
            raise InsufficientBalance("Payout amount must be positive.")

        with transaction.atomic():
            # Serializes concurrent payouts of the same user before the balance read.
            locked_user = User.objects.select_for_update().get(pk=user.pk)
            available = self.ledger.available_balance(locked_user)
            if amount > available:
                logger.warning(f"Payout of {amount} refused for user {user.pk}: balance {available}")
                raise InsufficientBalance(f"Insufficient balance: {available} available.")

            entry = self.ledger.record(
                type=Transaction.PAYOUT,
                amount=amount,
                status=Transaction.COMPLETED,
                payer=locked_user,
                external_reference=f'payout-{uuid.uuid4().hex[:10]}',
                description=f"Withdrawal of {amount}",
            )

        logger.info(f"Payout {entry.pk} of {amount} recorded for user {user.pk}")
        return entry
