"""
Management command to generate weekly reflection summaries.

Normally triggered by the Django Q weekly schedule (see `setup_schedules`);
run by hand to backfill or re-run a week. Users already summarized for the
week are skipped, so re-running is safe.

Usage:
    python manage.py run_weekly_summaries

    # A specific week (any date inside it)
    python manage.py run_weekly_summaries --date 2025-01-15

    # See who would be summarized
    python manage.py run_weekly_summaries --dry-run
"""
from datetime import date
from typing import Any
from django.core.management.base import BaseCommand, CommandError

from reflections.weekly import run_weekly_summaries


class Command(BaseCommand):
    help = 'Generate weekly summaries for active users (run once a week)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=str,
            help='Any date (YYYY-MM-DD) inside the week to summarize; defaults to today',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be done without generating or saving summaries',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Generate weekly summaries and report the outcome."""
        verbosity = options.get('verbosity', 1)
        dry_run = options.get('dry_run', False)

        reference = None
        if options.get('date'):
            try:
                reference = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid --date {options['date']!r}, expected YYYY-MM-DD")

        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No summaries will be generated'))

        result = run_weekly_summaries(reference=reference, dry_run=dry_run)

        if verbosity >= 2:
            for user_id in result.skipped_existing:
                self.stdout.write(f"  - User {user_id}: already summarized")
            for user_id in result.skipped_empty:
                self.stdout.write(f"  - User {user_id}: no reflections this week")

        for user_id, error in result.failures.items():
            self.stderr.write(
                self.style.ERROR(f"  ✗ User {user_id}: {error}")
            )
        for user_id, error in result.email_failures.items():
            self.stderr.write(
                self.style.ERROR(f"  ✗ User {user_id}: coach email not queued: {error}")
            )

        if result.failures or result.email_failures:
            self.stdout.write(self.style.WARNING(result.summary_line()))
        else:
            self.stdout.write(self.style.SUCCESS(f'✓ {result.summary_line()}'))
