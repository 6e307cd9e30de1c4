"""
Daily reflection flow.

Four questions are answered in a fixed order, then the day moves to review:

    react -> respond -> notice -> learn -> review

`advance_flow` is pure: no database, no clock, no text generation. The
orchestration in `reflections.services` decides what to persist.
"""
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


class ReflectionStep(str, Enum):
    REACT = 'react'
    RESPOND = 'respond'
    NOTICE = 'notice'
    LEARN = 'learn'
    REVIEW = 'review'


# Canonical daily reflection prompts. Keep wording stable and human.
PROMPTS: Dict[ReflectionStep, str] = {
    ReflectionStep.REACT: 'Where did you react from your ego today?',
    ReflectionStep.RESPOND: 'Instead of reacting, where did you manage to pause and respond today?',
    ReflectionStep.NOTICE: 'What did you notice about yourself in moments of reaction and response today?',
    ReflectionStep.LEARN: 'What is one thing that you learned about yourself today?',
    ReflectionStep.REVIEW: (
        "Great work. Thank you for taking the time to reflect on these questions.\n"
        "\n"
        "If you're ready to receive your Reflective Summary, type YES.\n"
        "Or, if you would like to change or amend any answer, type NO."
    ),
}

# Steps that collect an answer, in the order they are asked
ANSWER_STEPS: Tuple[ReflectionStep, ...] = (
    ReflectionStep.REACT,
    ReflectionStep.RESPOND,
    ReflectionStep.NOTICE,
    ReflectionStep.LEARN,
)

TRANSITIONS: Dict[ReflectionStep, ReflectionStep] = {
    ReflectionStep.REACT: ReflectionStep.RESPOND,
    ReflectionStep.RESPOND: ReflectionStep.NOTICE,
    ReflectionStep.NOTICE: ReflectionStep.LEARN,
    ReflectionStep.LEARN: ReflectionStep.REVIEW,
    ReflectionStep.REVIEW: ReflectionStep.REVIEW,
}


@dataclass(frozen=True)
class ReflectionState:
    user_id: int
    date: date
    step: ReflectionStep


@dataclass(frozen=True)
class FlowResult:
    next_state: ReflectionState
    next_prompt: str

    @property
    def step(self) -> ReflectionStep:
        return self.next_state.step


def is_blank(user_input: Optional[str]) -> bool:
    return not user_input or not user_input.strip()


def prompt_for(step) -> str:
    """Prompt for a step; unknown values fall back to the first question."""
    try:
        return PROMPTS[ReflectionStep(step)]
    except ValueError:
        return PROMPTS[ReflectionStep.REACT]


def advance_flow(state: ReflectionState, user_input: Optional[str]) -> FlowResult:
    """
    Move the flow one step forward.

    Blank input makes no progress and repeats the current question. `review`
    is a fixed point. An unrecognized step is returned unchanged with its
    prompt re-emitted rather than raising.
    """
    if is_blank(user_input):
        return FlowResult(next_state=state, next_prompt=prompt_for(state.step))

    try:
        current = ReflectionStep(state.step)
    except ValueError:
        return FlowResult(next_state=state, next_prompt=prompt_for(state.step))

    next_step = TRANSITIONS[current]
    return FlowResult(
        next_state=replace(state, step=next_step),
        next_prompt=PROMPTS[next_step],
    )


def start_daily_reflection(user_id: int, reflection_date: date) -> FlowResult:
    """Fresh state for a day that has no record yet."""
    return FlowResult(
        next_state=ReflectionState(user_id=user_id, date=reflection_date, step=ReflectionStep.REACT),
        next_prompt=PROMPTS[ReflectionStep.REACT],
    )


def first_missing_step(answers: Mapping[str, Optional[str]]) -> Optional[ReflectionStep]:
    """Earliest answer step, in canonical order, whose answer is blank."""
    for step in ANSWER_STEPS:
        if is_blank(answers.get(step.value)):
            return step
    return None
