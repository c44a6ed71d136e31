import logging
from decimal import Decimal

from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from .models import Transaction

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


class Ledger:
    """
    Append-only record of money movements and the source of truth for balances.

    Only escrow settlement writes here. Balances are always derived from the
    rows, never cached.
    """

    def record(self, *, type, amount, status, job=None, payer=None, payee=None,
               platform_fee_amount=None, net_amount=None, external_reference='', description=''):
        entry = Transaction.objects.create(
            job=job,
            payer=payer,
            payee=payee,
            type=type,
            amount=amount,
            platform_fee_amount=platform_fee_amount,
            net_amount=net_amount,
            external_reference=external_reference or '',
            description=description,
            status=status,
            settled_at=timezone.now() if status in Transaction.TERMINAL_STATUSES else None,
        )
        logger.info(
            f"Ledger entry {entry.id}: {type} {amount} status={status} "
            f"job={getattr(job, 'id', None)} payer={getattr(payer, 'id', None)} payee={getattr(payee, 'id', None)}"
        )
        return entry

    def settle(self, entry, status):
        """Move an open entry to a terminal status. Returns False if it was already settled."""
        if status not in Transaction.TERMINAL_STATUSES:
            raise ValueError(f"{status} is not a terminal ledger status")

        updated = Transaction.objects.filter(
            pk=entry.pk,
            status__in=Transaction.OPEN_STATUSES,
        ).update(status=status, settled_at=timezone.now())

        if updated:
            logger.info(f"Ledger entry {entry.pk} settled as {status}")
            entry.status = status
        else:
            logger.warning(f"Ledger entry {entry.pk} was already settled; {status} not applied")
        return bool(updated)

    def open_hold_for(self, job, reference):
        return (
            Transaction.objects.filter(
                job=job,
                type=Transaction.ESCROW_HOLD,
                external_reference=reference,
                status__in=Transaction.OPEN_STATUSES,
            )
            .order_by('-created_at', '-id')
            .first()
        )

    def has_settlement(self, job):
        return Transaction.objects.filter(
            job=job,
            type__in=[Transaction.ESCROW_RELEASE, Transaction.PLATFORM_FEE],
        ).exists()

    def available_balance(self, user):
        """Completed escrow releases received minus completed payouts made."""
        money = DecimalField(max_digits=12, decimal_places=2)
        totals = Transaction.objects.filter(status=Transaction.COMPLETED).aggregate(
            released=Coalesce(
                Sum('amount', filter=Q(type=Transaction.ESCROW_RELEASE, payee=user)),
                Value(ZERO),
                output_field=money,
            ),
            paid_out=Coalesce(
                Sum('amount', filter=Q(type=Transaction.PAYOUT, payer=user)),
                Value(ZERO),
                output_field=money,
            ),
        )
        return (totals['released'] - totals['paid_out']).quantize(Decimal('0.01'))

    def entries_for_user(self, user):
        return Transaction.objects.filter(Q(payer=user) | Q(payee=user)).select_related('job')

    def entries_for_job(self, job):
        return Transaction.objects.filter(job=job)
