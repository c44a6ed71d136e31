from django.db import models
from django.db.models import Q
from django.conf import settings
from auditlog.registry import auditlog


class Job(models.Model):
    OPEN = 'open'
    CLAIMED = 'claimed'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    STATUS_CHOICES = (
        (OPEN, 'Open'),
        (CLAIMED, 'Claimed'),
        (IN_PROGRESS, 'In Progress'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    )

    PROPERTY_TYPE_CHOICES = (
        ('showing', 'Showing'),
        ('open_house', 'Open House'),
    )

    poster = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='posted_jobs', on_delete=models.PROTECT)
    claimer = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='claimed_jobs', on_delete=models.PROTECT, null=True, blank=True)

    property_address = models.TextField()
    property_type = models.CharField(max_length=20, choices=PROPERTY_TYPE_CHOICES)
    property_latitude = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)
    property_longitude = models.DecimalField(max_digits=10, decimal_places=7, null=True, blank=True)

    scheduled_date = models.DateTimeField()
    scheduled_time = models.CharField(max_length=50)  # e.g. "2:00 PM - 4:00 PM"
    duration_minutes = models.PositiveIntegerField()
    description = models.TextField(blank=True)
    special_instructions = models.TextField(blank=True)

    # Frozen at creation.
    fee = models.DecimalField(max_digits=10, decimal_places=2)
    platform_fee_amount = models.DecimalField(max_digits=10, decimal_places=2)
    payout_amount = models.DecimalField(max_digits=10, decimal_places=2)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=OPEN, db_index=True)
    claim_generation = models.PositiveIntegerField(default=0)

    claimer_checked_in = models.BooleanField(default=False)
    claimer_checked_in_at = models.DateTimeField(null=True, blank=True)
    claimer_checked_out = models.BooleanField(default=False)
    claimer_checked_out_at = models.DateTimeField(null=True, blank=True)

    external_payment_reference = models.CharField(max_length=255, blank=True)
    escrow_held = models.BooleanField(default=False)
    payment_released = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    claimed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'jobs'
        ordering = ['scheduled_date', 'id']
        constraints = [
            models.CheckConstraint(
                condition=Q(payment_released=False) | Q(escrow_held=True),
                name='job_released_requires_escrow',
            ),
            models.CheckConstraint(
                condition=Q(claimer_checked_out=False) | Q(claimer_checked_in=True),
                name='job_checkout_requires_checkin',
            ),
            models.CheckConstraint(
                condition=(
                    Q(claimer__isnull=True, status__in=['open', 'cancelled'])
                    | Q(claimer__isnull=False, status__in=['claimed', 'in_progress', 'completed', 'cancelled'])
                ),
                name='job_claimer_matches_status',
            ),
            models.CheckConstraint(
                condition=Q(fee__gt=0),
                name='job_fee_positive',
            ),
        ]

    def __str__(self):
        return f"{self.property_address} ({self.status})"

    @property
    def has_coordinates(self):
        return self.property_latitude is not None and self.property_longitude is not None


class CheckIn(models.Model):
    """One geofence verification attempt. Failed attempts are kept too."""
    CHECK_IN = 'check_in'
    CHECK_OUT = 'check_out'

    TYPE_CHOICES = (
        (CHECK_IN, 'Check In'),
        (CHECK_OUT, 'Check Out'),
    )

    job = models.ForeignKey(Job, on_delete=models.PROTECT, related_name='check_ins')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='check_ins')
    latitude = models.DecimalField(max_digits=10, decimal_places=7)
    longitude = models.DecimalField(max_digits=10, decimal_places=7)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    distance_from_property = models.DecimalField(max_digits=12, decimal_places=2)  # feet
    verified = models.BooleanField(default=False)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'check_ins'
        ordering = ['-timestamp', '-id']

    def __str__(self):
        outcome = 'verified' if self.verified else 'out of range'
        return f"{self.type} for job {self.job_id}: {self.distance_from_property} ft, {outcome}"


auditlog.register(Job)
