import json
from django.http import JsonResponse, HttpRequest
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from .auth import bearer_auth_required
from .forms import PreferencesForm
from .models import UserProfile

PREFERENCE_FIELDS = PreferencesForm.Meta.fields


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@bearer_auth_required
def profile_preferences(request: HttpRequest) -> JsonResponse:
    """
    Read or update the caller's preferences.

    Path: /accounts/preferences/
    Method: GET returns the preferences; POST applies a partial update.
    Body (POST, all optional):
    {
        "timezone": "Europe/Berlin",
        "weekly_summary_enabled": boolean,
        "coach_name": string,
        "coach_email": string,
        "share_weekly_summary": boolean
    }
    """
    profile, _ = UserProfile.objects.get_or_create(user=request.user)

    if request.method == 'GET':
        return JsonResponse(profile.to_dict())

    try:
        data = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    if not isinstance(data, dict):
        return JsonResponse({'error': 'Invalid JSON'}, status=400)

    # Start from the stored values so omitted keys are left unchanged
    merged = {field: getattr(profile, field) for field in PREFERENCE_FIELDS}
    merged.update({key: value for key, value in data.items() if key in PREFERENCE_FIELDS})

    form = PreferencesForm(merged, instance=profile)
    if not form.is_valid():
        errors = {
            field: [error['message'] for error in field_errors]
            for field, field_errors in form.errors.get_json_data().items()
        }
        first_field, messages = next(iter(errors.items()))
        return JsonResponse({'error': f"{first_field}: {messages[0]}", 'fields': errors}, status=400)

    profile = form.save()
    return JsonResponse(profile.to_dict())
