import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Job',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('property_address', models.TextField()),
                ('property_type', models.CharField(choices=[('showing', 'Showing'), ('open_house', 'Open House')], max_length=20)),
                ('property_latitude', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('property_longitude', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('scheduled_date', models.DateTimeField()),
                ('scheduled_time', models.CharField(max_length=50)),
                ('duration_minutes', models.PositiveIntegerField()),
                ('description', models.TextField(blank=True)),
                ('special_instructions', models.TextField(blank=True)),
                ('fee', models.DecimalField(decimal_places=2, max_digits=10)),
                ('platform_fee_amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('payout_amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('status', models.CharField(choices=[('open', 'Open'), ('claimed', 'Claimed'), ('in_progress', 'In Progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], db_index=True, default='open', max_length=20)),
                ('claim_generation', models.PositiveIntegerField(default=0)),
                ('claimer_checked_in', models.BooleanField(default=False)),
                ('claimer_checked_in_at', models.DateTimeField(blank=True, null=True)),
                ('claimer_checked_out', models.BooleanField(default=False)),
                ('claimer_checked_out_at', models.DateTimeField(blank=True, null=True)),
                ('external_payment_reference', models.CharField(blank=True, max_length=255)),
                ('escrow_held', models.BooleanField(default=False)),
                ('payment_released', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('claimed_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('claimer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='claimed_jobs', to=settings.AUTH_USER_MODEL)),
                ('poster', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='posted_jobs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'jobs',
                'ordering': ['scheduled_date', 'id'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('payment_released', False), ('escrow_held', True), _connector='OR'), name='job_released_requires_escrow'),
                    models.CheckConstraint(condition=models.Q(('claimer_checked_out', False), ('claimer_checked_in', True), _connector='OR'), name='job_checkout_requires_checkin'),
                    models.CheckConstraint(condition=models.Q(models.Q(('claimer__isnull', True), ('status__in', ['open', 'cancelled'])), models.Q(('claimer__isnull', False), ('status__in', ['claimed', 'in_progress', 'completed', 'cancelled'])), _connector='OR'), name='job_claimer_matches_status'),
                    models.CheckConstraint(condition=models.Q(('fee__gt', 0)), name='job_fee_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CheckIn',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('latitude', models.DecimalField(decimal_places=7, max_digits=10)),
                ('longitude', models.DecimalField(decimal_places=7, max_digits=10)),
                ('type', models.CharField(choices=[('check_in', 'Check In'), ('check_out', 'Check Out')], max_length=20)),
                ('distance_from_property', models.DecimalField(decimal_places=2, max_digits=12)),
                ('verified', models.BooleanField(default=False)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('timestamp', models.DateTimeField(auto_now_add=True)),
                ('job', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='check_ins', to='jobs.job')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='check_ins', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'check_ins',
                'ordering': ['-timestamp', '-id'],
            },
        ),
    ]
