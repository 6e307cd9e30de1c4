from typing import Any
from django.core.management.base import BaseCommand

from config.schedules import ensure_weekly_summary_schedule


class Command(BaseCommand):
    help = 'Register the weekly summary schedule with Django Q'

    def handle(self, *args: Any, **options: Any) -> None:
        """Create the weekly summary schedule if it does not exist."""
        schedule, created = ensure_weekly_summary_schedule()
        if created:
            self.stdout.write(
                self.style.SUCCESS(f'Created schedule "{schedule.name}" (next run {schedule.next_run})')
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Schedule "{schedule.name}" already exists (next run {schedule.next_run})')
            )
