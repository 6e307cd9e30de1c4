from django.contrib import admin
from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'timezone', 'weekly_summary_enabled', 'share_weekly_summary', 'created_at']
    list_filter = ['weekly_summary_enabled', 'share_weekly_summary', 'timezone']
    search_fields = ['user__username', 'user__email', 'coach_email']
    readonly_fields = ['created_at', 'updated_at']
