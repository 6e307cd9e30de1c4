import json
from datetime import date
from typing import Optional

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from accounts.auth import bearer_auth_required
from accounts.utils import get_user_today
from .llm import get_text_generator
from .models import WeeklySummary
from .repository import DailyReflectionRepository
from .services import reflection_stats, submit_answer

import logging
logger = logging.getLogger(__name__)


def parse_reflection_date(value) -> Optional[date]:
    """Parse a YYYY-MM-DD string, returning None for anything else."""
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


@csrf_exempt
@require_POST
@bearer_auth_required
def practice_answer(request: HttpRequest) -> JsonResponse:
    """
    Submit one answer of today's reflection.

    Path: /practice/answer
    Method: POST
    Body: {"date": "YYYY-MM-DD", "userInput": "..."}
    Returns: {"type": "question" | "mirror" | "completed", "text": "..."}
    """
    try:
        data = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        logger.warning(f"Rejected answer from user {request.user.pk}: invalid JSON")
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    if not isinstance(data, dict):
        logger.warning(f"Rejected answer from user {request.user.pk}: body is not an object")
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    reflection_date = parse_reflection_date(data.get('date'))
    if reflection_date is None:
        logger.warning(f"Rejected answer from user {request.user.pk}: bad date {data.get('date')!r}")
        return JsonResponse({'error': 'date must be YYYY-MM-DD'}, status=400)

    user_input = data.get('userInput', '')
    if user_input is None:
        user_input = ''
    if not isinstance(user_input, str):
        logger.warning(f"Rejected answer from user {request.user.pk}: userInput is not a string")
        return JsonResponse({'error': 'userInput must be a string'}, status=400)

    response = submit_answer(
        request.user,
        reflection_date,
        user_input,
        generator=get_text_generator(),
    )
    return JsonResponse(response.to_dict())


@require_GET
@bearer_auth_required
def reflection_detail(request: HttpRequest, reflection_date: str) -> JsonResponse:
    """The caller's answers and mirror for one date."""
    parsed_date = parse_reflection_date(reflection_date)
    if parsed_date is None:
        logger.warning(f"Rejected reflection lookup from user {request.user.pk}: bad date {reflection_date!r}")
        return JsonResponse({'error': 'date must be YYYY-MM-DD'}, status=400)

    reflection = DailyReflectionRepository().get(request.user, parsed_date)
    if reflection is None:
        return JsonResponse({'error': 'Reflection not found'}, status=404)

    return JsonResponse(reflection.to_dict())


@require_GET
@bearer_auth_required
def reflection_dates(request: HttpRequest) -> JsonResponse:
    """All dates with a reflection for the caller, ascending."""
    dates = DailyReflectionRepository().list_dates(request.user)
    return JsonResponse({'dates': [d.isoformat() for d in dates]})


@require_GET
@bearer_auth_required
def practice_stats(request: HttpRequest) -> JsonResponse:
    """Current streak and total reflections, with 'today' in the caller's timezone."""
    today = get_user_today(request.user)
    return JsonResponse(reflection_stats(request.user, today))


@require_GET
@bearer_auth_required
def weekly_summaries(request: HttpRequest) -> JsonResponse:
    """The caller's weekly summaries, newest first."""
    summaries = WeeklySummary.objects.filter(user=request.user).order_by('-week_start')
    return JsonResponse({'summaries': [summary.to_dict() for summary in summaries]})
