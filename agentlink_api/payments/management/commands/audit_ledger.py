from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from jobs.models import Job
from payments.ledger import Ledger
from payments.models import Transaction

User = get_user_model()


class Command(BaseCommand):
    help = "Cross-checks job payment flags against the ledger and reports any drift."

    def add_arguments(self, parser):
        parser.add_argument('--strict', action='store_true', help='Exit with an error when any issue is found')

    def find_issues(self):
        ledger = Ledger()
        issues = []

        for job in Job.objects.filter(payment_released=True):
            releases = list(ledger.entries_for_job(job).filter(type=Transaction.ESCROW_RELEASE))
            fees = list(ledger.entries_for_job(job).filter(type=Transaction.PLATFORM_FEE))
            if not releases or not fees:
                issues.append(f"Job {job.pk} is released but has no complete settlement in the ledger.")
                continue
            if len(releases) > 1 or len(fees) > 1:
                issues.append(f"Job {job.pk} has duplicate settlement entries.")
            release, fee = releases[0], fees[0]
            if release.amount != job.payout_amount:
                issues.append(f"Job {job.pk} released {release.amount}, expected {job.payout_amount}.")
            if fee.amount != job.platform_fee_amount:
                issues.append(f"Job {job.pk} platform fee {fee.amount}, expected {job.platform_fee_amount}.")
            if release.amount + fee.amount != job.fee:
                issues.append(f"Job {job.pk} settlement does not add up to the fee {job.fee}.")

        settled_job_ids = (
            Transaction.objects.filter(type=Transaction.ESCROW_RELEASE)
            .values_list('job_id', flat=True)
        )
        for job in Job.objects.filter(pk__in=settled_job_ids, payment_released=False):
            issues.append(f"Job {job.pk} has a release entry but is not marked as released.")

        stale_holds = Transaction.objects.filter(
            type=Transaction.ESCROW_HOLD,
            status__in=Transaction.OPEN_STATUSES,
            job__status=Job.CANCELLED,
        )
        for hold in stale_holds:
            issues.append(f"Hold {hold.external_reference} on cancelled job {hold.job_id} is still {hold.status}.")

        for user in User.objects.filter(payments_made__type=Transaction.PAYOUT).distinct():
            balance = ledger.available_balance(user)
            if balance < 0:
                issues.append(f"User {user.pk} has a negative balance of {balance}.")

        return issues

    def handle(self, *args, **options):
        issues = self.find_issues()

        if not issues:
            self.stdout.write(self.style.SUCCESS("Ledger is consistent with job state."))
            return

        for issue in issues:
            self.stdout.write(self.style.ERROR(issue))

        if options['strict']:
            raise CommandError(f"{len(issues)} ledger issue(s) found.")
        self.stdout.write(self.style.WARNING(f"{len(issues)} ledger issue(s) found."))
