from django.conf import settings
from django.db import models
from django.db.models import Q
from auditlog.registry import auditlog


class Transaction(models.Model):
    """
    One money movement. Rows are append-only: after creation the only permitted
    change is a status move from pending/held to a terminal status, done through
    ``Ledger.settle``.
    """
    ESCROW_HOLD = 'escrow_hold'
    ESCROW_RELEASE = 'escrow_release'
    PLATFORM_FEE = 'platform_fee'
    REFUND = 'refund'
    PAYOUT = 'payout'

    TYPE_CHOICES = (
        (ESCROW_HOLD, 'Escrow Hold'),
        (ESCROW_RELEASE, 'Escrow Release'),
        (PLATFORM_FEE, 'Platform Fee'),
        (REFUND, 'Refund'),
        (PAYOUT, 'Payout'),
    )

    PENDING = 'pending'
    HELD = 'held'
    COMPLETED = 'completed'
    FAILED = 'failed'
    REFUNDED = 'refunded'

    STATUS_CHOICES = (
        (PENDING, 'Pending'),
        (HELD, 'Held'),
        (COMPLETED, 'Completed'),
        (FAILED, 'Failed'),
        (REFUNDED, 'Refunded'),
    )

    OPEN_STATUSES = (PENDING, HELD)
    TERMINAL_STATUSES = (COMPLETED, FAILED, REFUNDED)

    job = models.ForeignKey('jobs.Job', on_delete=models.PROTECT, null=True, blank=True, related_name='transactions')
    payer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, null=True, blank=True, related_name='payments_made')
    payee = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, null=True, blank=True, related_name='payments_received')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    platform_fee_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    net_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    description = models.TextField(blank=True)
    external_reference = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES)
    created_at = models.DateTimeField(auto_now_add=True)
    settled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'transactions'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['job', 'type'],
                condition=Q(type__in=['escrow_release', 'platform_fee']),
                name='one_settlement_entry_per_job',
            ),
            models.CheckConstraint(condition=Q(amount__gte=0), name='transaction_amount_non_negative'),
        ]

    def __str__(self):
        return f"{self.type} of {self.amount} ({self.status})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Ledger entries are append-only; use Ledger.settle() to change status.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Ledger entries cannot be deleted.")


auditlog.register(Transaction)
