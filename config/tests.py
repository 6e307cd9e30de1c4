from datetime import datetime, timezone as dt_timezone
from io import StringIO

from django.core.management import call_command
from django.test import RequestFactory, SimpleTestCase, TestCase
from django_q.models import Schedule

from .middleware import JsonExceptionMiddleware
from .schedules import (
    WEEKLY_SUMMARY_FUNC,
    WEEKLY_SUMMARY_SCHEDULE_NAME,
    ensure_weekly_summary_schedule,
    next_sunday_run,
)


class NextSundayRunTests(SimpleTestCase):

    def test_midweek(self):
        now = datetime(2025, 3, 5, 9, 0, tzinfo=dt_timezone.utc)

        self.assertEqual(next_sunday_run(now), datetime(2025, 3, 9, 20, 0, tzinfo=dt_timezone.utc))

    def test_sunday_before_run_time(self):
        now = datetime(2025, 3, 9, 8, 0, tzinfo=dt_timezone.utc)

        self.assertEqual(next_sunday_run(now), datetime(2025, 3, 9, 20, 0, tzinfo=dt_timezone.utc))

    def test_sunday_after_run_time(self):
        now = datetime(2025, 3, 9, 21, 0, tzinfo=dt_timezone.utc)

        self.assertEqual(next_sunday_run(now), datetime(2025, 3, 16, 20, 0, tzinfo=dt_timezone.utc))


class WeeklyScheduleTests(TestCase):

    def setUp(self):
        # post_migrate may already have registered it
        Schedule.objects.filter(name=WEEKLY_SUMMARY_SCHEDULE_NAME).delete()

    def test_schedule_created_once(self):
        schedule, created = ensure_weekly_summary_schedule()
        self.assertTrue(created)
        self.assertEqual(schedule.func, WEEKLY_SUMMARY_FUNC)
        self.assertEqual(schedule.schedule_type, Schedule.WEEKLY)

        _, created = ensure_weekly_summary_schedule()
        self.assertFalse(created)
        self.assertEqual(Schedule.objects.filter(name=WEEKLY_SUMMARY_SCHEDULE_NAME).count(), 1)

    def test_setup_schedules_command(self):
        out = StringIO()

        call_command('setup_schedules', stdout=out)

        self.assertTrue(Schedule.objects.filter(name=WEEKLY_SUMMARY_SCHEDULE_NAME).exists())


class JsonExceptionMiddlewareTests(SimpleTestCase):

    def test_non_api_paths_are_left_alone(self):
        middleware = JsonExceptionMiddleware(lambda request: None)
        request = RequestFactory().get('/admin/')

        self.assertIsNone(middleware.process_exception(request, RuntimeError('boom')))

    def test_api_paths_get_json_500(self):
        middleware = JsonExceptionMiddleware(lambda request: None)
        request = RequestFactory().post('/practice/answer')

        with self.assertLogs('config.middleware', level='ERROR'):
            response = middleware.process_exception(request, RuntimeError('boom'))

        self.assertEqual(response.status_code, 500)
