import logging

from django.db import transaction
from kombu.exceptions import OperationalError

from .tasks import MESSAGES, deliver_job_notification

logger = logging.getLogger(__name__)

JOB_CLAIMED = 'job_claimed'
JOB_CHECKED_OUT = 'job_checked_out'
PAYMENT_RECEIVED = 'payment_received'


def _dispatch(event, job_id, recipient_id):
    try:
        deliver_job_notification.delay(event, job_id, recipient_id)
    except OperationalError as e:
        # Delivery is best-effort; the transition is already committed.
        logger.warning(f"Could not queue {event} notification for job {job_id}: {e}")


def notify_on_commit(event, job, recipient_id):
    """Queue a notification once the surrounding transaction commits."""
    if event not in MESSAGES:
        raise ValueError(f"Unknown notification event: {event}")
    if recipient_id is None:
        return
    transaction.on_commit(lambda: _dispatch(event, job.pk, recipient_id))
