import json
from datetime import date, timedelta
from unittest.mock import Mock, patch

from django.contrib.auth import get_user_model
from django.test import TestCase

from accounts.testing import BearerAuthMixin
from .models import DailyReflection, WeeklySummary


class PracticeApiTestCase(BearerAuthMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.generator = Mock()
        self.generator.generate.return_value = 'You noticed the pause.'
        patcher = patch('reflections.views.get_text_generator', return_value=self.generator)
        patcher.start()
        self.addCleanup(patcher.stop)

    def post_answer(self, payload):
        return self.client.post(
            '/practice/answer',
            data=json.dumps(payload) if not isinstance(payload, str) else payload,
            content_type='application/json',
            **self.auth_headers,
        )


class PracticeAnswerViewTests(PracticeApiTestCase):

    def test_requires_bearer_token(self):
        response = self.client.post(
            '/practice/answer',
            data=json.dumps({'date': '2025-03-03', 'userInput': 'hi'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 401)
        self.assertFalse(DailyReflection.objects.exists())

    def test_rejects_get(self):
        response = self.client.get('/practice/answer', **self.auth_headers)

        self.assertEqual(response.status_code, 405)

    def test_first_answer_returns_next_question(self):
        response = self.post_answer({'date': '2025-03-03', 'userInput': 'I snapped at my coworker'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'type': 'question',
            'text': 'Instead of reacting, where did you manage to pause and respond today?',
        })
        reflection = DailyReflection.objects.get(user=self.get_auth_user())
        self.assertEqual(reflection.react, 'I snapped at my coworker')

    def test_full_day_returns_mirror_then_completed(self):
        for answer in ['a', 'b', 'c']:
            self.post_answer({'date': '2025-03-03', 'userInput': answer})

        response = self.post_answer({'date': '2025-03-03', 'userInput': 'd'})
        self.assertEqual(response.json(), {'type': 'mirror', 'text': 'You noticed the pause.'})

        response = self.post_answer({'date': '2025-03-03', 'userInput': 'again'})
        self.assertEqual(response.json(), {'type': 'completed', 'text': 'You noticed the pause.'})
        self.assertEqual(self.generator.generate.call_count, 1)

    def test_missing_user_input_is_treated_as_blank(self):
        response = self.post_answer({'date': '2025-03-03'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['text'], 'Where did you react from your ego today?')

    def test_invalid_date_returns_400(self):
        for bad in ['03/03/2025', '2025-02-30', '', None]:
            with self.subTest(date=bad):
                response = self.post_answer({'date': bad, 'userInput': 'x'})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), {'error': 'date must be YYYY-MM-DD'})

    def test_invalid_json_returns_400(self):
        with self.assertLogs('reflections.views', level='WARNING') as logs:
            response = self.post_answer('{nope')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Invalid JSON'})
        self.assertIn('invalid JSON', logs.output[0])

    def test_non_string_input_returns_400(self):
        response = self.post_answer({'date': '2025-03-03', 'userInput': 42})

        self.assertEqual(response.status_code, 400)

    def test_generator_failure_returns_json_500(self):
        self.generator.generate.side_effect = RuntimeError('upstream down')
        for answer in ['a', 'b', 'c']:
            self.post_answer({'date': '2025-03-03', 'userInput': answer})

        with self.assertLogs('config.middleware', level='ERROR'):
            response = self.post_answer({'date': '2025-03-03', 'userInput': 'd'})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'error': 'Internal server error'})


class ReflectionReadViewTests(PracticeApiTestCase):

    def setUp(self):
        super().setUp()
        # Registers the user through the bearer decorator
        self.client.get('/practice/reflections', **self.auth_headers)
        self.user = self.get_auth_user()

    def test_reflection_detail(self):
        DailyReflection.objects.create(
            user=self.user,
            reflection_date=date(2025, 3, 3),
            step='review',
            react='r', respond='p', notice='n', learn='l',
            daily_mirror='m',
        )

        response = self.client.get('/practice/reflection/2025-03-03', **self.auth_headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'date': '2025-03-03',
            'react': 'r',
            'respond': 'p',
            'notice': 'n',
            'learn': 'l',
            'mirror': 'm',
        })

    def test_reflection_detail_without_mirror(self):
        DailyReflection.objects.create(user=self.user, reflection_date=date(2025, 3, 3), react='r')

        response = self.client.get('/practice/reflection/2025-03-03', **self.auth_headers)

        self.assertIsNone(response.json()['mirror'])

    def test_reflection_detail_not_found(self):
        response = self.client.get('/practice/reflection/2025-03-03', **self.auth_headers)

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'error': 'Reflection not found'})

    def test_reflection_detail_bad_date(self):
        response = self.client.get('/practice/reflection/yesterday', **self.auth_headers)

        self.assertEqual(response.status_code, 400)

    def test_other_users_reflections_are_invisible(self):
        other = get_user_model().objects.create_user(username='someone-else')
        DailyReflection.objects.create(user=other, reflection_date=date(2025, 3, 3))

        response = self.client.get('/practice/reflection/2025-03-03', **self.auth_headers)

        self.assertEqual(response.status_code, 404)

    def test_reflection_dates_ascending(self):
        for day in [5, 3, 4]:
            DailyReflection.objects.create(user=self.user, reflection_date=date(2025, 3, day))

        response = self.client.get('/practice/reflections', **self.auth_headers)

        self.assertEqual(response.json(), {'dates': ['2025-03-03', '2025-03-04', '2025-03-05']})

    @patch('reflections.views.get_user_today')
    def test_stats(self, mock_today):
        today = date(2025, 3, 10)
        mock_today.return_value = today
        for offset in [1, 2, 4]:
            DailyReflection.objects.create(user=self.user, reflection_date=today - timedelta(days=offset))

        response = self.client.get('/practice/stats', **self.auth_headers)

        self.assertEqual(response.json(), {'currentStreak': 2, 'totalReflections': 3})

    def test_weekly_summaries_newest_first(self):
        WeeklySummary.objects.create(
            user=self.user,
            week_start=date(2025, 3, 3),
            week_end=date(2025, 3, 9),
            summary_text='first week',
            reflection_count=2,
        )
        WeeklySummary.objects.create(
            user=self.user,
            week_start=date(2025, 3, 10),
            week_end=date(2025, 3, 16),
            summary_text='second week',
            reflection_count=5,
        )

        response = self.client.get('/practice/weekly-summaries', **self.auth_headers)

        summaries = response.json()['summaries']
        self.assertEqual([s['text'] for s in summaries], ['second week', 'first week'])
        self.assertEqual(summaries[0]['weekStart'], '2025-03-10')
        self.assertEqual(summaries[0]['reflectionCount'], 5)
