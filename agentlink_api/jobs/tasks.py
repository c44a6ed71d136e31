import logging
from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

from .models import Job

logger = logging.getLogger(__name__)

User = get_user_model()

MESSAGES = {
    'job_claimed': (
        "Job Claimed",
        "Your job at {job.property_address} has been claimed.",
    ),
    'job_checked_out': (
        "Agent Checked Out",
        "The covering agent has checked out of the job at {job.property_address}. "
        "You can now mark it complete to release payment.",
    ),
    'payment_received': (
        "Payment Received",
        "You've received ${job.payout_amount} for the job at {job.property_address}.",
    ),
}


@shared_task(autoretry_for=(SMTPException,), retry_backoff=True, max_retries=3)
def deliver_job_notification(event, job_id, recipient_id):
    title, template = MESSAGES[event]
    job = Job.objects.get(pk=job_id)
    recipient = User.objects.get(pk=recipient_id)

    message = f"""
    Hello {recipient.get_full_name() or recipient.email},

    {template.format(job=job)}

    The {settings.SITE_NAME} Team
    """

    send_mail(
        subject=title,
        message=message.strip(),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[recipient.email],
        fail_silently=False,
    )
    logger.info(f"Sent {event} notification for job {job_id} to user {recipient_id}")
