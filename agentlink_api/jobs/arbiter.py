"""
Claim arbitration: exactly one of any number of concurrent claimants wins.

The check (``status == open``) and the write (``status = claimed``) are a
single conditional UPDATE, so the database decides the winner. Nothing about
the claim is allowed to happen before this returns True for the caller.
"""
import logging

from django.db.models import F
from django.utils import timezone

from .models import Job

logger = logging.getLogger(__name__)


def try_claim(job_id, claimant) -> bool:
    now = timezone.now()
    won = (
        Job.objects
        .filter(pk=job_id, status=Job.OPEN)
        .exclude(poster=claimant)
        .update(
            status=Job.CLAIMED,
            claimer=claimant,
            claim_generation=F('claim_generation') + 1,
            claimed_at=now,
            updated_at=now,
        )
    ) == 1

    if won:
        logger.info(f"User {claimant.pk} won the claim on job {job_id}")
    else:
        logger.warning(f"User {claimant.pk} lost or was refused the claim on job {job_id}")
    return won
