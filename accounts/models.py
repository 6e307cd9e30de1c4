from django.db import models
from django.contrib.auth import get_user_model
import pytz

User = get_user_model()

TIMEZONE_CHOICES = [(tz, tz) for tz in pytz.common_timezones]


class UserProfile(models.Model):
    """Per-user preferences: timezone, weekly summaries and coach sharing."""
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    timezone = models.CharField(
        max_length=50,
        choices=TIMEZONE_CHOICES,
        default='UTC',
        help_text="User's timezone for streaks and today's reflection date"
    )
    weekly_summary_enabled = models.BooleanField(
        default=True,
        help_text="Include this user in the weekly summary batch"
    )
    coach_name = models.CharField(max_length=120, blank=True)
    coach_email = models.EmailField(blank=True)
    share_weekly_summary = models.BooleanField(
        default=False,
        help_text="Email each new weekly summary to the coach"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Profile for {self.user.username}"

    @property
    def shares_with_coach(self) -> bool:
        return self.share_weekly_summary and bool(self.coach_email)

    def to_dict(self):
        return {
            'timezone': self.timezone,
            'weekly_summary_enabled': self.weekly_summary_enabled,
            'coach_name': self.coach_name,
            'coach_email': self.coach_email,
            'share_weekly_summary': self.share_weekly_summary,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
