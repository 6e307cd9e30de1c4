import pytz
from django.contrib.auth.models import AbstractUser
from datetime import date
from django.utils import timezone

import logging
logger = logging.getLogger(__name__)


def get_user_today(user: AbstractUser) -> date:
    """
    Get today's date in the user's timezone.

    Args:
        user: Django User instance; a profile is created if the signal didn't run

    Returns:
        datetime.date: Today's date in the user's timezone (UTC if unknown)
    """
    from accounts.models import UserProfile

    profile, _ = UserProfile.objects.get_or_create(user=user)
    try:
        user_tz = pytz.timezone(profile.timezone)
    except pytz.exceptions.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {profile.timezone!r} for user {user.pk}, using UTC")
        user_tz = pytz.utc
    return timezone.now().astimezone(user_tz).date()
