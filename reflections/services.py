"""
Practice answer orchestration.

One submitted answer moves a day's reflection forward:

1. Load or create the day's record.
2. A day that already has its mirror short-circuits as `completed`.
3. The answer is stored on the question it answers (the step *before* the
   transition), and the record moves to the next step.
4. Reaching review re-reads the record and checks all four answers. A gap
   (left behind by an earlier partial failure) sends the user back to the first
   missing question instead of synthesizing from incomplete data.
5. Otherwise the mirror is generated and stored once.

Steps 1 and 3 run in one transaction with the row locked, so concurrent
submissions for the same day are serialized. Text generation runs outside the
transaction, and its errors propagate to the HTTP layer.
"""
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Dict, Iterable, Optional

from django.contrib.auth.models import AbstractUser
from django.db import transaction

from .flow import (
    PROMPTS,
    ReflectionState,
    ReflectionStep,
    advance_flow,
    first_missing_step,
    is_blank,
    prompt_for,
)
from .llm import get_text_generator
from .mirror import Generator, generate_daily_mirror
from .models import ANSWER_FIELDS
from .repository import DailyReflectionRepository

import logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PracticeResponse:
    """Reply to the client: `question`, `mirror` or `completed` plus its text."""
    type: str
    text: str

    QUESTION = 'question'
    MIRROR = 'mirror'
    COMPLETED = 'completed'

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def submit_answer(
    user: AbstractUser,
    reflection_date: date,
    user_input: Optional[str],
    *,
    repository: Optional[DailyReflectionRepository] = None,
    generator: Optional[Generator] = None,
) -> PracticeResponse:
    """Record one answer for the day and return what the client shows next."""
    repository = repository or DailyReflectionRepository()

    with transaction.atomic():
        reflection = repository.get_or_create(user, reflection_date, lock=True)

        if reflection.is_completed:
            return PracticeResponse(PracticeResponse.COMPLETED, reflection.daily_mirror)

        if is_blank(user_input):
            # No progress; repeat the current question without touching the record
            return PracticeResponse(PracticeResponse.QUESTION, prompt_for(reflection.step))

        current_state = ReflectionState(user_id=user.pk, date=reflection_date, step=reflection.step)
        flow_result = advance_flow(current_state, user_input)

        # The answer belongs to the question just answered, not the next one
        if current_state.step in ANSWER_FIELDS:
            repository.update_field(reflection.pk, current_state.step, user_input)

        if flow_result.step != current_state.step:
            repository.update_step(reflection.pk, flow_result.step)

    if flow_result.step != ReflectionStep.REVIEW:
        return PracticeResponse(PracticeResponse.QUESTION, flow_result.next_prompt)

    # Runs unlocked: two racing review submissions may both generate, but
    # set_summary keeps only the first stored mirror.
    return _complete_review(repository, reflection.pk, generator)


def _complete_review(
    repository: DailyReflectionRepository,
    record_id: int,
    generator: Optional[Generator],
) -> PracticeResponse:
    reflection = repository.refresh(record_id)

    if reflection.daily_mirror:
        return PracticeResponse(PracticeResponse.COMPLETED, reflection.daily_mirror)

    missing_step = first_missing_step(reflection.answers)
    if missing_step is not None:
        logger.warning(
            f"Reflection {record_id} reached review without a '{missing_step.value}' answer; "
            f"sending the user back to that question"
        )
        repository.update_step(record_id, missing_step)
        return PracticeResponse(PracticeResponse.QUESTION, PROMPTS[missing_step])

    generator = generator or get_text_generator()
    mirror_text = generate_daily_mirror(
        generator,
        react=reflection.react,
        respond=reflection.respond,
        notice=reflection.notice,
        learn=reflection.learn,
    )
    stored_text = repository.set_summary(record_id, mirror_text)
    logger.info(f"Generated daily mirror for reflection {record_id}")

    return PracticeResponse(PracticeResponse.MIRROR, stored_text)


def calculate_streak(dates: Iterable[date], today: date) -> int:
    """
    Consecutive reflection days ending today, or yesterday if today is not done yet.

    A most recent reflection older than yesterday means the streak is broken.
    """
    reflected = set(dates)
    if not reflected:
        return 0

    if today in reflected:
        check_date = today
    elif today - timedelta(days=1) in reflected:
        check_date = today - timedelta(days=1)
    else:
        return 0

    streak = 0
    while check_date in reflected:
        streak += 1
        check_date -= timedelta(days=1)
    return streak


def reflection_stats(user: AbstractUser, today: date, repository: Optional[DailyReflectionRepository] = None) -> Dict[str, int]:
    repository = repository or DailyReflectionRepository()
    dates = repository.list_dates(user)
    return {
        'currentStreak': calculate_streak(dates, today),
        'totalReflections': len(dates),
    }
