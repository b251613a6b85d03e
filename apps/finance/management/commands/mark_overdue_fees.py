"""
Management command to persist the overdue status of unpaid fees past their
due date. Safe to run repeatedly, e.g. from a daily cron job.
"""

from django.core.management.base import BaseCommand

from apps.finance import services
from apps.finance.models import Fee


class Command(BaseCommand):
    help = 'Mark pending fees past their due date as overdue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--hostel',
            type=str,
            help='Only update fees of the hostel with this code'
        )

    def handle(self, *args, **options):
        fees = Fee.objects.all()
        if options.get('hostel'):
            fees = fees.filter(hostel__code__iexact=options['hostel'])

        updated = services.mark_overdue_fees(fees)
        self.stdout.write(self.style.SUCCESS(f'{updated} fees marked as overdue'))
