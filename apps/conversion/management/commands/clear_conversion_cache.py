"""
Management command for clearing cached conversions from the CLI.

Usage:
    python manage.py clear_conversion_cache
    python manage.py clear_conversion_cache --expired-only
    python manage.py clear_conversion_cache --pattern "ap_conversion_42"
"""

from django.core.management.base import BaseCommand

from apps.conversion.cache import AP_NAMESPACE_PATTERN, ConversionCache


class Command(BaseCommand):
    help = 'Clear cached AP conversions'

    def add_arguments(self, parser):
        parser.add_argument(
            '--pattern',
            type=str,
            default=AP_NAMESPACE_PATTERN,
            help=f'Key glob to clear (default: {AP_NAMESPACE_PATTERN})'
        )
        parser.add_argument(
            '--expired-only',
            action='store_true',
            help='Only delete entries that have already expired'
        )

    def handle(self, *args, **options):
        cache = ConversionCache()

        if options['expired_only']:
            deleted = cache.purge_expired()
            self.stdout.write(self.style.SUCCESS(f"Purged {deleted} expired conversions"))
            return

        deleted = cache.clear(options['pattern'])
        self.stdout.write(self.style.SUCCESS(
            f"Cleared {deleted} conversions matching {options['pattern']}"
        ))
