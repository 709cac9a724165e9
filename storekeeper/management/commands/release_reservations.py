"""
Management command to release stale warehouse reservations.

Usage:
    python manage.py release_reservations
    python manage.py release_reservations --dry-run
    python manage.py release_reservations --older-than 120
"""

from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from storekeeper.conf import storekeeper_settings
from storekeeper.services.receiving import StockReceiving


class Command(BaseCommand):
    """Release stale reservations command."""

    help = 'Releases warehouse reservations older than RESERVATION_TTL_MINUTES'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be released without releasing it',
        )
        parser.add_argument(
            '--older-than',
            type=int,
            metavar='MINUTES',
            help='Override RESERVATION_TTL_MINUTES',
        )
        parser.add_argument(
            '--user',
            default='system',
            help='User recorded on the released rows',
        )

    def handle(self, *args, **options):
        minutes = options['older_than']
        if minutes is None:
            minutes = storekeeper_settings.RESERVATION_TTL_MINUTES
        if minutes < 0:
            raise CommandError('--older-than must not be negative')
        if not minutes:
            self.stdout.write('Reservations never expire (RESERVATION_TTL_MINUTES = 0)')
            return

        cutoff = timezone.now() - timedelta(minutes=minutes)
        released = StockReceiving.release_reservations(
            older_than=cutoff,
            user=options['user'],
            dry_run=options['dry_run'],
        )

        if options['dry_run']:
            self.stdout.write(f'{len(released)} reservation(s) would be released')
        else:
            self.stdout.write(
                self.style.SUCCESS(f'{len(released)} reservation(s) released')
            )
