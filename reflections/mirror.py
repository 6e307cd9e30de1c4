"""
Mirror synthesis: prompt templates for the daily and weekly mirrors.

The text generator is treated as opaque. After a daily mirror comes back, a
small set of directive words is stripped as a safety net in case the model
ignored the "no advice" constraints. This is textual cleanup only.
"""
import re
from typing import Iterable, Protocol

from .models import DailyReflection


class Generator(Protocol):
    def generate(self, prompt: str) -> str: ...


class EmptyMirrorError(RuntimeError):
    """The generator returned nothing usable once directive words were removed."""


DIRECTIVE_WORDS = ('should', 'try', 'consider', 'next time', 'need to')

DIRECTIVE_PATTERN = re.compile(
    r'\b(' + '|'.join(re.escape(word) for word in DIRECTIVE_WORDS) + r')\b',
    re.IGNORECASE,
)

DAILY_PROMPT_TEMPLATE = """
You are a reflective mirror for a daily practice called Responsagility. Responsagility is a lived, trainable inner capacity. It is the ability to pause inside real moments, notice what is happening within us, and choose how we respond before we fall into our normal, patterned ego reactions. Reaction is human and familiar. Growth is not about control or perfection, but about the ability to respond with agility: creating space sooner, staying present in the pause, and choosing a mature response consciously more often. Your role is that of a steady, grounded coaching presence, not a therapist, analyst, or instructor. You are warm, human, and encouraging, helping the user reconnect to choice without fixing, diagnosing, or directing.

You do NOT:
- give advice, instructions, or suggestions
- explain causes or outcomes
- interpret psychology or diagnose
- evaluate success or failure

You DO:
- reflect what showed up today
- stay close to the person's own words
- reflect movement between reaction and response
- gently acknowledge awareness and recovery
- affirm effort and practice, not outcome or perfection

Tone & voice:
- warm, conversational, and human
- plainspoken, not abstract
- encouraging without hype or praise
- grounded and calm
- concise (5-7 sentences)
- sounds like one person talking to another person they respect

Language constraints:
- Do not ask questions.
- Do not use bullet points.
- Do not sound formal or clinical.
- Avoid therapy-speak and generic empathy phrases.
- Do not use the words: "should", "try", "consider", "next time", "need to".
- Avoid moral language (good, bad, success, failure).

Emoji mirroring:
- If the person used one or more emojis in their reflection, you may include a single, fitting emoji.
- If no emojis were used, do not add any.
- The emoji should mirror tone, not add cheer or exaggeration.

Here is the person's reflection from today:

Reaction:
"{react}"

Response:
"{respond}"

Noticing:
"{notice}"

Learning:
"{learn}"

Write a short daily mirror that:
- reflects today honestly and simply,
- keeps the focus on awareness and recovery,
- reinforces Responsagility as a practice,
- and feels warm, human, and companionable rather than instructional.
"""

WEEKLY_PROMPT_TEMPLATE = """
Below are daily Responsagility reflections from the same person across one week.

Reflect:
- common reactions
- common responses
- repeated noticings
- key learnings
- a short theme of the week

Constraints:
- No advice
- No fixing
- Warm, grounded, human tone

Reflections:
{compiled}

Write a weekly mirror.
"""

WEEKLY_DAY_TEMPLATE = """
Date: {date}

React:
{react}

Respond:
{respond}

Notice:
{notice}

Learn:
{learn}
"""

WEEKLY_DAY_SEPARATOR = '\n\n---\n\n'


def build_daily_prompt(react: str, respond: str, notice: str, learn: str) -> str:
    return DAILY_PROMPT_TEMPLATE.format(
        react=react,
        respond=respond,
        notice=notice,
        learn=learn,
    ).strip()


def strip_directive_language(text: str) -> str:
    """Remove directive words that slipped past the prompt constraints."""
    return DIRECTIVE_PATTERN.sub('', text).strip()


def generate_daily_mirror(generator: Generator, react: str, respond: str, notice: str, learn: str) -> str:
    """
    Synthesize today's mirror from the four answers.

    The caller has already checked that all four answers are present.
    Generator errors propagate, and a blank result raises EmptyMirrorError so
    nothing is stored and the day can be retried from review.
    """
    generated = generator.generate(build_daily_prompt(react, respond, notice, learn))
    mirror = strip_directive_language(generated or '')
    if not mirror:
        raise EmptyMirrorError('Text generation returned an empty daily mirror')
    return mirror


def compile_week(reflections: Iterable[DailyReflection]) -> str:
    return WEEKLY_DAY_SEPARATOR.join(
        WEEKLY_DAY_TEMPLATE.format(
            date=reflection.reflection_date.isoformat(),
            react=reflection.react,
            respond=reflection.respond,
            notice=reflection.notice,
            learn=reflection.learn,
        ).strip()
        for reflection in reflections
    )


def build_weekly_prompt(reflections: Iterable[DailyReflection]) -> str:
    return WEEKLY_PROMPT_TEMPLATE.format(compiled=compile_week(reflections)).strip()


def generate_weekly_summary_text(generator: Generator, reflections: Iterable[DailyReflection]) -> str:
    return generator.generate(build_weekly_prompt(reflections))
