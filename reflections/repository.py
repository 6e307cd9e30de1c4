"""
Data access for daily reflection records.

The orchestration layer calls these in a fixed order: load or create, persist
the answer, persist the next step, and maybe persist the mirror. Every write
stamps `updated_at`; `QuerySet.update()` skips `auto_now`, so it is set here.
"""
from datetime import date
from typing import List, Optional

from django.contrib.auth.models import AbstractUser
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from .flow import ReflectionStep
from .models import ANSWER_FIELDS, DailyReflection

import logging
logger = logging.getLogger(__name__)


class DailyReflectionRepository:
    """Load, create and update one user's per-date reflection records."""

    def get(self, user: AbstractUser, reflection_date: date, lock: bool = False) -> Optional[DailyReflection]:
        queryset = DailyReflection.objects.all()
        if lock:
            queryset = queryset.select_for_update()
        return queryset.filter(user=user, reflection_date=reflection_date).first()

    def create(self, user: AbstractUser, reflection_date: date) -> DailyReflection:
        """
        Create the day's record at the first step.

        A concurrent request may have created it already; the unique
        constraint fires and the existing row is returned instead.
        """
        try:
            # Savepoint so the IntegrityError doesn't poison an outer transaction
            with transaction.atomic():
                return DailyReflection.objects.create(
                    user=user,
                    reflection_date=reflection_date,
                    step=ReflectionStep.REACT.value,
                )
        except IntegrityError:
            logger.info(f"Reflection for {user.username} on {reflection_date} already exists, fetching it")
            return DailyReflection.objects.get(user=user, reflection_date=reflection_date)

    def get_or_create(self, user: AbstractUser, reflection_date: date, lock: bool = False) -> DailyReflection:
        reflection = self.get(user, reflection_date, lock=lock)
        if reflection is None:
            reflection = self.create(user, reflection_date)
        return reflection

    def refresh(self, record_id: int) -> DailyReflection:
        return DailyReflection.objects.get(pk=record_id)

    def update_field(self, record_id: int, field: str, value: str) -> None:
        if field not in ANSWER_FIELDS:
            raise ValueError(f"Not an answer field: {field}")
        DailyReflection.objects.filter(pk=record_id).update(**{field: value, 'updated_at': timezone.now()})

    def update_step(self, record_id: int, step: ReflectionStep) -> None:
        DailyReflection.objects.filter(pk=record_id).update(
            step=ReflectionStep(step).value,
            updated_at=timezone.now(),
        )

    def set_summary(self, record_id: int, text: str) -> str:
        """
        Store the daily mirror unless one is already stored. An empty string
        counts as not stored.

        Returns the mirror that ends up persisted.
        """
        DailyReflection.objects.filter(
            Q(daily_mirror__isnull=True) | Q(daily_mirror=''),
            pk=record_id,
        ).update(
            daily_mirror=text,
            updated_at=timezone.now(),
        )
        return DailyReflection.objects.values_list('daily_mirror', flat=True).get(pk=record_id)

    def list_dates(self, user: AbstractUser) -> List[date]:
        return list(
            DailyReflection.objects.filter(user=user)
            .order_by('reflection_date')
            .values_list('reflection_date', flat=True)
        )

    def list_between(self, user: AbstractUser, start: date, end: date) -> List[DailyReflection]:
        return list(
            DailyReflection.objects.filter(
                user=user,
                reflection_date__gte=start,
                reflection_date__lte=end,
            ).order_by('reflection_date')
        )
