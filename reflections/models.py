from django.db import models
from django.contrib.auth import get_user_model

from .flow import ReflectionStep

User = get_user_model()

STEP_CHOICES = [(step.value, step.value.title()) for step in ReflectionStep]

ANSWER_FIELDS = ('react', 'respond', 'notice', 'learn')


class DailyReflection(models.Model):
    """
    One user's reflection for one calendar date:
    1. react: where did you react from your ego today?
    2. respond: where did you pause and respond instead?
    3. notice: what did you notice about yourself?
    4. learn: what did you learn about yourself?
    Then review, where the daily mirror is synthesized from the four answers.
    """
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='daily_reflections')
    reflection_date = models.DateField()
    step = models.CharField(max_length=16, choices=STEP_CHOICES, default=ReflectionStep.REACT.value)

    react = models.TextField(blank=True, default='')
    respond = models.TextField(blank=True, default='')
    notice = models.TextField(blank=True, default='')
    learn = models.TextField(blank=True, default='')

    # Set once, when all four answers are present at review
    daily_mirror = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ['user', 'reflection_date']
        ordering = ['-reflection_date']
        indexes = [
            models.Index(fields=['user', 'reflection_date'], name='daily_reflection_user_date_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.user.username} - {self.reflection_date} ({self.step})"

    @property
    def answers(self) -> dict:
        return {field: getattr(self, field) for field in ANSWER_FIELDS}

    @property
    def is_completed(self) -> bool:
        return self.step == ReflectionStep.REVIEW.value and bool(self.daily_mirror)

    def to_dict(self):
        return {
            'date': self.reflection_date.isoformat(),
            'react': self.react,
            'respond': self.respond,
            'notice': self.notice,
            'learn': self.learn,
            'mirror': self.daily_mirror,
        }


class WeeklySummary(models.Model):
    """Synthesized mirror of one user's Monday-to-Sunday week. Written once by the weekly job."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='weekly_summaries')
    week_start = models.DateField()
    week_end = models.DateField()
    summary_text = models.TextField()
    reflection_count = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['user', 'week_start', 'week_end']
        ordering = ['-week_start']
        verbose_name_plural = 'Weekly summaries'
        indexes = [
            models.Index(fields=['user', 'week_start'], name='weekly_summary_user_week_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.user.username} - week of {self.week_start}"

    def to_dict(self):
        return {
            'weekStart': self.week_start.isoformat(),
            'weekEnd': self.week_end.isoformat(),
            'text': self.summary_text,
            'reflectionCount': self.reflection_count,
            'createdAt': self.created_at.isoformat(),
        }
