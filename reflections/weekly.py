"""
Weekly summary batch.

Once per run: work out the Monday-start week, walk the active users, and write
one WeeklySummary per user who reflected that week and doesn't have one yet.

Re-running for the same week is a no-op for users already summarized. Each
user is processed inside their own error boundary; a failure is recorded and
the loop moves on to the next user. Overlapping runs are not guarded against
here; the unique constraint turns a racing duplicate into a per-user failure.

A coach email that cannot be queued does not undo the saved summary; it is
recorded in `email_failures` and the user still counts as created.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AbstractUser
from django.db.models import QuerySet
from django.utils import timezone
from django_q.tasks import async_task

from .llm import get_text_generator
from .mirror import Generator, generate_weekly_summary_text
from .models import WeeklySummary
from .repository import DailyReflectionRepository

import logging
logger = logging.getLogger(__name__)

User = get_user_model()


class CoachEmailError(Exception):
    """The summary was saved but queueing the coach email failed."""


@dataclass
class WeeklyRunResult:
    week_start: date
    week_end: date
    created: List[int] = field(default_factory=list)
    skipped_existing: List[int] = field(default_factory=list)
    skipped_empty: List[int] = field(default_factory=list)
    failures: Dict[int, str] = field(default_factory=dict)
    email_failures: Dict[int, str] = field(default_factory=dict)

    def summary_line(self) -> str:
        line = (
            f"Week {self.week_start} to {self.week_end}: "
            f"{len(self.created)} created, "
            f"{len(self.skipped_existing)} already summarized, "
            f"{len(self.skipped_empty)} without reflections, "
            f"{len(self.failures)} failed"
        )
        if self.email_failures:
            line += f", {len(self.email_failures)} coach email(s) not queued"
        return line


def get_week_range(reference: date) -> Tuple[date, date]:
    """Monday and Sunday of the week containing `reference`."""
    week_start = reference - timedelta(days=reference.weekday())
    return week_start, week_start + timedelta(days=6)


def get_active_users() -> QuerySet:
    """Users flagged for weekly processing."""
    return User.objects.filter(
        is_active=True,
        profile__weekly_summary_enabled=True,
    ).select_related('profile').order_by('id')


def run_weekly_summaries(
    reference: Optional[date] = None,
    generator: Optional[Generator] = None,
    repository: Optional[DailyReflectionRepository] = None,
    dry_run: bool = False,
) -> WeeklyRunResult:
    """
    Generate the weekly summaries for the week containing `reference` (default: today).

    Args:
        reference: Any date inside the week to summarize
        generator: Text generator; the process-wide client when omitted
        repository: Daily reflection access
        dry_run: Log what would be generated without calling the generator or writing

    Returns:
        WeeklyRunResult with per-user outcomes
    """
    week_start, week_end = get_week_range(reference or timezone.localdate())
    repository = repository or DailyReflectionRepository()
    result = WeeklyRunResult(week_start=week_start, week_end=week_end)

    users = get_active_users()
    logger.info(f"Running weekly summaries for {week_start} to {week_end} ({users.count()} active users)")

    for user in users:
        try:
            outcome = summarize_user_week(
                user,
                week_start,
                week_end,
                generator=generator,
                repository=repository,
                dry_run=dry_run,
            )
        except CoachEmailError as e:
            logger.error(f"Coach email not queued for user {user.pk}: {e}", exc_info=True)
            result.created.append(user.pk)
            result.email_failures[user.pk] = str(e)
            continue
        except Exception as e:
            logger.error(f"Weekly summary failed for user {user.pk}: {e}", exc_info=True)
            result.failures[user.pk] = str(e)
            continue

        if outcome == 'existing':
            result.skipped_existing.append(user.pk)
        elif outcome == 'empty':
            result.skipped_empty.append(user.pk)
        else:
            result.created.append(user.pk)

    if result.failures:
        logger.error(f"Weekly summaries failed for users: {sorted(result.failures)}")
    logger.info(result.summary_line())
    return result


def summarize_user_week(
    user: AbstractUser,
    week_start: date,
    week_end: date,
    generator: Optional[Generator] = None,
    repository: Optional[DailyReflectionRepository] = None,
    dry_run: bool = False,
) -> str:
    """
    Summarize one user's week.

    Returns:
        'existing' if the week was already summarized, 'empty' if the user has
        no reflections that week, 'created' otherwise
    """
    repository = repository or DailyReflectionRepository()

    already_done = WeeklySummary.objects.filter(
        user=user,
        week_start=week_start,
        week_end=week_end,
    ).exists()
    if already_done:
        logger.debug(f"Week {week_start} already summarized for user {user.pk}")
        return 'existing'

    reflections = repository.list_between(user, week_start, week_end)
    if not reflections:
        return 'empty'

    if dry_run:
        logger.info(
            f"[DRY RUN] Would summarize {len(reflections)} reflection(s) "
            f"for user {user.pk}, week {week_start}"
        )
        return 'created'

    generator = generator or get_text_generator()
    summary_text = generate_weekly_summary_text(generator, reflections)

    summary = WeeklySummary.objects.create(
        user=user,
        week_start=week_start,
        week_end=week_end,
        summary_text=summary_text,
        reflection_count=len(reflections),
    )
    logger.info(f"Created weekly summary {summary.pk} for user {user.pk} ({len(reflections)} reflections)")

    profile = getattr(user, 'profile', None)
    if profile is not None and profile.shares_with_coach:
        try:
            share_summary_with_coach(summary, profile.coach_email, profile.coach_name)
        except Exception as e:
            raise CoachEmailError(str(e)) from e

    return 'created'


def share_summary_with_coach(summary: WeeklySummary, coach_email: str, coach_name: str = '') -> None:
    """Queue the weekly summary email to the user's coach."""
    greeting = f"Hello {coach_name}," if coach_name else "Hello,"
    subject = f"Weekly Responsagility summary: {summary.week_start} to {summary.week_end}"
    message = f'''
{greeting}

Here is the weekly reflection summary shared with you ({summary.reflection_count} daily reflection(s)).

{summary.summary_text}

- Responsagility
'''
    async_task(
        'django.core.mail.send_mail',
        subject,
        message,
        settings.DEFAULT_FROM_EMAIL,
        [coach_email],
        fail_silently=False,
    )
    logger.info(f"Queued weekly summary {summary.pk} for coach {coach_email}")


def run_scheduled_weekly_summaries() -> str:
    """Entry point for the Django Q weekly schedule."""
    return run_weekly_summaries().summary_line()
