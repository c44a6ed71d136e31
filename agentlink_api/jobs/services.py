import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from escrow.exceptions import PaymentNotReady
from escrow.fees import round2, split_fee
from escrow.services import EscrowSettlement

from . import geofence
from .arbiter import try_claim
from .exceptions import InvalidTransition, JobNotFound, NotClaimable, Unauthorized
from .models import CheckIn, Job
from .notifications import JOB_CHECKED_OUT, JOB_CLAIMED, PAYMENT_RECEIVED, notify_on_commit

logger = logging.getLogger(__name__)

VERIFIED = 'verified'
OUT_OF_RANGE = 'out_of_range'


@dataclass
class PresenceResult:
    """Outcome of a check-in or check-out. Being out of range is a valid answer, not an error."""
    job: Job
    check_in: CheckIn
    distance: float
    verified: bool

    @property
    def outcome(self):
        return VERIFIED if self.verified else OUT_OF_RANGE


class JobService:
    """
    The job state machine.

    open -> claimed -> in_progress -> completed, with cancelled reachable from
    open or claimed, and unclaim taking claimed back to open.

    Each transition re-checks its guard in the WHERE clause of a conditional
    UPDATE, so the persisted row decides, not the copy read at the start. The
    status change, processor call and ledger writes share one atomic block.
    """

    def __init__(self, settlement=None):
        self.settlement = settlement or EscrowSettlement()

    def _get(self, job_id):
        try:
            return Job.objects.select_related('poster', 'claimer').get(pk=job_id)
        except Job.DoesNotExist:
            raise JobNotFound()

    def create_job(self, *, poster, fee, **details):
        """Create an open job. The fee split is computed here and never again."""
        split = split_fee(fee, settings.PLATFORM_FEE_RATE)
        job = Job.objects.create(
            poster=poster,
            fee=split.fee,
            platform_fee_amount=split.platform_fee_amount,
            payout_amount=split.payout_amount,
            status=Job.OPEN,
            **details,
        )
        logger.info(
            f"Job {job.pk} posted by user {poster.pk}: fee {split.fee}, "
            f"platform fee {split.platform_fee_amount}, payout {split.payout_amount}"
        )
        return job

    def claim(self, job_id, claimant):
        job = self._get(job_id)
        if job.poster_id == claimant.pk:
            raise NotClaimable("You cannot claim your own job.")

        with transaction.atomic():
            if not try_claim(job.pk, claimant):
                raise NotClaimable()

            job.refresh_from_db()
            hold = self.settlement.open_hold(job)
            job.external_payment_reference = hold['reference']
            job.escrow_held = False
            job.updated_at = timezone.now()
            job.save(update_fields=['external_payment_reference', 'escrow_held', 'updated_at'])

            notify_on_commit(JOB_CLAIMED, job, job.poster_id)

        logger.info(f"Job {job.pk} claimed by user {claimant.pk}")
        return job

    def confirm_payment(self, job_id, poster):
        """Mark escrow as funded once the processor reports a capturable hold."""
        job = self._get(job_id)
        if job.poster_id != poster.pk:
            raise Unauthorized("Only the job poster can confirm payment.")
        if job.status not in (Job.CLAIMED, Job.IN_PROGRESS):
            raise InvalidTransition("This job has no active payment hold.")
        if job.escrow_held:
            return job

        self.settlement.confirm_hold(job)

        updated = Job.objects.filter(
            pk=job.pk,
            status__in=[Job.CLAIMED, Job.IN_PROGRESS],
            external_payment_reference=job.external_payment_reference,
        ).update(escrow_held=True, updated_at=timezone.now())
        if not updated:
            raise InvalidTransition("The job changed while confirming payment. Refresh and retry.")

        job.refresh_from_db()
        logger.info(f"Escrow funded for job {job.pk}")
        return job

    def checkout_secret(self, job_id, poster):
        job = self._get(job_id)
        if job.poster_id != poster.pk:
            raise Unauthorized("Only the job poster can pay for this job.")
        if job.status not in (Job.CLAIMED, Job.IN_PROGRESS):
            raise InvalidTransition("This job has no active payment hold.")
        return job, self.settlement.client_secret(job)

    def _record_attempt(self, job, user, latitude, longitude, type, distance, verified, ip_address):
        return CheckIn.objects.create(
            job=job,
            user=user,
            latitude=geofence.quantize_coordinate(latitude),
            longitude=geofence.quantize_coordinate(longitude),
            type=type,
            distance_from_property=round2(distance),
            verified=verified,
            ip_address=ip_address,
        )

    def check_in(self, job_id, claimant, latitude, longitude, ip_address=None):
        job = self._get(job_id)
        if job.claimer_id != claimant.pk:
            raise Unauthorized("Only the claimer can check in.")
        if job.status != Job.CLAIMED:
            raise InvalidTransition("Check-in is only possible on a claimed job.")

        distance = geofence.distance_to_property(job, latitude, longitude)
        verified = geofence.verify(distance, geofence.configured_radius())

        with transaction.atomic():
            if verified:
                now = timezone.now()
                updated = Job.objects.filter(
                    pk=job.pk,
                    claimer=claimant,
                    status=Job.CLAIMED,
                ).update(
                    status=Job.IN_PROGRESS,
                    claimer_checked_in=True,
                    claimer_checked_in_at=now,
                    updated_at=now,
                )
                if not updated:
                    raise InvalidTransition("The job changed while checking in. Refresh and retry.")

            attempt = self._record_attempt(
                job, claimant, latitude, longitude, CheckIn.CHECK_IN, distance, verified, ip_address,
            )

        job.refresh_from_db()
        if verified:
            logger.info(f"User {claimant.pk} checked in to job {job.pk} at {distance:.2f} ft")
        else:
            logger.warning(f"User {claimant.pk} check-in to job {job.pk} out of range: {distance:.2f} ft")
        return PresenceResult(job=job, check_in=attempt, distance=round(distance, 2), verified=verified)

    def check_out(self, job_id, claimant, latitude, longitude, ip_address=None):
        job = self._get(job_id)
        if job.claimer_id != claimant.pk:
            raise Unauthorized("Only the claimer can check out.")
        if job.status != Job.IN_PROGRESS or not job.claimer_checked_in or job.claimer_checked_out:
            raise InvalidTransition("Check-out requires a verified check-in and no previous check-out.")

        distance = geofence.distance_to_property(job, latitude, longitude)
        verified = geofence.verify(distance, geofence.configured_radius())

        with transaction.atomic():
            if verified:
                now = timezone.now()
                updated = Job.objects.filter(
                    pk=job.pk,
                    claimer=claimant,
                    status=Job.IN_PROGRESS,
                    claimer_checked_in=True,
                    claimer_checked_out=False,
                ).update(
                    claimer_checked_out=True,
                    claimer_checked_out_at=now,
                    updated_at=now,
                )
                if not updated:
                    raise InvalidTransition("The job changed while checking out. Refresh and retry.")
                notify_on_commit(JOB_CHECKED_OUT, job, job.poster_id)

            attempt = self._record_attempt(
                job, claimant, latitude, longitude, CheckIn.CHECK_OUT, distance, verified, ip_address,
            )

        job.refresh_from_db()
        if verified:
            logger.info(f"User {claimant.pk} checked out of job {job.pk} at {distance:.2f} ft")
        else:
            logger.warning(f"User {claimant.pk} check-out of job {job.pk} out of range: {distance:.2f} ft")
        return PresenceResult(job=job, check_in=attempt, distance=round(distance, 2), verified=verified)

    def complete(self, job_id, poster):
        """
        Capture escrow and pay the claimer. Calling it again on a completed job
        returns the job without touching the ledger.
        """
        job = self._get(job_id)
        if job.poster_id != poster.pk:
            raise Unauthorized("Only the job poster can complete this job.")
        if job.payment_released:
            return job
        if not job.claimer_checked_out:
            raise InvalidTransition("The claimer has not checked out with a verified location yet.")
        if not job.escrow_held:
            raise PaymentNotReady("Escrow is not funded for this job.")

        with transaction.atomic():
            now = timezone.now()
            won = Job.objects.filter(
                pk=job.pk,
                poster=poster,
                status=Job.IN_PROGRESS,
                claimer_checked_out=True,
                escrow_held=True,
                payment_released=False,
            ).update(
                status=Job.COMPLETED,
                payment_released=True,
                completed_at=now,
                updated_at=now,
            )
            if not won:
                job.refresh_from_db()
                if job.payment_released:
                    return job
                raise InvalidTransition("The job changed while completing. Refresh and retry.")

            self.settlement.capture_and_split(job)
            notify_on_commit(PAYMENT_RECEIVED, job, job.claimer_id)

        job.refresh_from_db()
        logger.info(f"Job {job.pk} completed by poster {poster.pk}")
        return job

    def cancel(self, job_id, poster):
        job = self._get(job_id)
        if job.poster_id != poster.pk:
            raise Unauthorized("Only the job poster can cancel this job.")
        if job.status not in (Job.OPEN, Job.CLAIMED):
            raise InvalidTransition("Only open or claimed jobs can be cancelled.")

        with transaction.atomic():
            now = timezone.now()
            updated = Job.objects.filter(
                pk=job.pk,
                poster=poster,
                status__in=[Job.OPEN, Job.CLAIMED],
            ).update(status=Job.CANCELLED, cancelled_at=now, updated_at=now)
            if not updated:
                raise InvalidTransition("The job changed while cancelling. Refresh and retry.")

            # Re-read under the row lock: a claim may have landed since the first read.
            job.refresh_from_db()
            action = self.settlement.void_or_refund(job)
            if action:
                Job.objects.filter(pk=job.pk).update(escrow_held=False)

        job.refresh_from_db()
        logger.info(f"Job {job.pk} cancelled by poster {poster.pk} (escrow: {action or 'none'})")
        return job

    def unclaim(self, job_id, claimant):
        job = self._get(job_id)
        if job.claimer_id != claimant.pk:
            raise Unauthorized("Only the claimer can release this job.")
        if job.status != Job.CLAIMED:
            raise InvalidTransition("A job can only be released before check-in.")

        with transaction.atomic():
            now = timezone.now()
            updated = Job.objects.filter(
                pk=job.pk,
                claimer=claimant,
                status=Job.CLAIMED,
            ).update(status=Job.OPEN, claimer=None, claimed_at=None, updated_at=now)
            if not updated:
                raise InvalidTransition("The job changed while releasing it. Refresh and retry.")

            job.refresh_from_db()
            action = self.settlement.void_or_refund(job)
            Job.objects.filter(pk=job.pk).update(external_payment_reference='', escrow_held=False)

        job.refresh_from_db()
        logger.info(f"Job {job.pk} released by user {claimant.pk} (escrow: {action or 'none'})")
        return job
