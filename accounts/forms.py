from django import forms
from .models import UserProfile


class PreferencesForm(forms.ModelForm):
    """Validates preference updates sent by the mobile client."""
    class Meta:
        model = UserProfile
        fields = [
            'timezone',
            'weekly_summary_enabled',
            'coach_name',
            'coach_email',
            'share_weekly_summary',
        ]

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('share_weekly_summary') and not cleaned_data.get('coach_email'):
            self.add_error('coach_email', 'A coach email is required to share weekly summaries.')
        return cleaned_data
