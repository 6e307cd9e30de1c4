"""
Django Q schedules owned by the project.

The weekly summary batch runs every Sunday evening (UTC) so the Monday-start
week it summarizes is complete.
"""
from datetime import datetime, time, timedelta
from typing import Optional, Tuple

from django.utils import timezone
from django_q.models import Schedule

WEEKLY_SUMMARY_SCHEDULE_NAME = 'weekly-summaries'
WEEKLY_SUMMARY_FUNC = 'reflections.weekly.run_scheduled_weekly_summaries'
WEEKLY_SUMMARY_RUN_AT = time(hour=20, minute=0)


def next_sunday_run(now: Optional[datetime] = None) -> datetime:
    """Next Sunday at WEEKLY_SUMMARY_RUN_AT, strictly after `now`."""
    now = now or timezone.now()
    days_ahead = (6 - now.weekday()) % 7
    candidate = datetime.combine(
        now.date() + timedelta(days=days_ahead),
        WEEKLY_SUMMARY_RUN_AT,
        tzinfo=now.tzinfo,
    )
    if candidate <= now:
        candidate += timedelta(weeks=1)
    return candidate


def ensure_weekly_summary_schedule() -> Tuple[Schedule, bool]:
    """Create the weekly schedule if missing. Existing schedules are left untouched."""
    return Schedule.objects.get_or_create(
        name=WEEKLY_SUMMARY_SCHEDULE_NAME,
        defaults={
            'func': WEEKLY_SUMMARY_FUNC,
            'schedule_type': Schedule.WEEKLY,
            'repeats': -1,
            'next_run': next_sunday_run(),
        },
    )
