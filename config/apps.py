from django.apps import AppConfig
from django.db.models.signals import post_migrate

import logging as log
logger = log.getLogger(__name__)

def register_schedules(sender, **kwargs):
    """
    Registers the weekly summary schedule with Django Q.
    This runs after migrations so the schedule table exists.
    """
    # Only run once the django_q tables are migrated
    if sender.name != 'django_q':
        return

    from .schedules import ensure_weekly_summary_schedule

    try:
        schedule, created = ensure_weekly_summary_schedule()
        if created:
            logger.info(f"✅ Weekly summary schedule registered (next run {schedule.next_run})")
    except Exception as e:
        logger.error(f"⚠️ Could not register weekly summary schedule: {e}")


class ConfigConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'config'

    def ready(self):
        post_migrate.connect(register_schedules)
