from django.contrib import admin
from .models import DailyReflection, WeeklySummary


@admin.register(DailyReflection)
class DailyReflectionAdmin(admin.ModelAdmin):
    list_display = ['user', 'reflection_date', 'step', 'has_mirror', 'updated_at']
    list_filter = ['step', 'reflection_date']
    search_fields = ['user__username', 'user__email']
    date_hierarchy = 'reflection_date'
    readonly_fields = ['created_at', 'updated_at']

    @admin.display(boolean=True, description='Mirror')
    def has_mirror(self, obj: DailyReflection) -> bool:
        return bool(obj.daily_mirror)


@admin.register(WeeklySummary)
class WeeklySummaryAdmin(admin.ModelAdmin):
    list_display = ['user', 'week_start', 'week_end', 'reflection_count', 'created_at']
    list_filter = ['week_start']
    search_fields = ['user__username', 'user__email']
    readonly_fields = ['created_at']
