from datetime import date, timedelta
from unittest.mock import Mock

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase

from .flow import PROMPTS, ReflectionStep
from .mirror import EmptyMirrorError
from .models import DailyReflection
from .repository import DailyReflectionRepository
from .services import PracticeResponse, calculate_streak, reflection_stats, submit_answer

User = get_user_model()


class SubmitAnswerTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='reflector', email='reflector@example.com')
        self.today = date(2025, 3, 3)
        self.generator = Mock()
        self.generator.generate.return_value = 'You caught yourself and came back.'

    def _submit(self, user_input):
        return submit_answer(self.user, self.today, user_input, generator=self.generator)

    def _answer_all(self):
        self._submit('I snapped at my coworker')
        self._submit('I paused before replying to my partner')
        self._submit('My jaw tightens first')
        return self._submit('I can feel it coming')

    def test_first_answer_is_stored_on_react(self):
        response = self._submit('I snapped at my coworker')

        self.assertEqual(response.type, PracticeResponse.QUESTION)
        self.assertEqual(
            response.text,
            'Instead of reacting, where did you manage to pause and respond today?',
        )
        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.react, 'I snapped at my coworker')
        self.assertEqual(reflection.respond, '')
        self.assertEqual(reflection.step, 'respond')

    def test_each_answer_lands_on_its_question(self):
        self._answer_all()

        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.react, 'I snapped at my coworker')
        self.assertEqual(reflection.respond, 'I paused before replying to my partner')
        self.assertEqual(reflection.notice, 'My jaw tightens first')
        self.assertEqual(reflection.learn, 'I can feel it coming')

    def test_fourth_answer_returns_mirror(self):
        response = self._answer_all()

        self.assertEqual(response, PracticeResponse(PracticeResponse.MIRROR, 'You caught yourself and came back.'))
        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.step, 'review')
        self.assertEqual(reflection.daily_mirror, 'You caught yourself and came back.')
        self.assertTrue(reflection.is_completed)

        prompt = self.generator.generate.call_args[0][0]
        self.assertIn('I snapped at my coworker', prompt)
        self.assertIn('I can feel it coming', prompt)

    def test_completed_day_returns_stored_mirror(self):
        self._answer_all()
        self.generator.generate.reset_mock()

        response = self._submit('anything else')

        self.assertEqual(response.type, PracticeResponse.COMPLETED)
        self.assertEqual(response.text, 'You caught yourself and came back.')
        self.generator.generate.assert_not_called()

        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.learn, 'I can feel it coming')

    def test_blank_input_repeats_current_question(self):
        self._submit('I snapped at my coworker')

        response = self._submit('   ')

        self.assertEqual(response, PracticeResponse(PracticeResponse.QUESTION, PROMPTS[ReflectionStep.RESPOND]))
        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.step, 'respond')
        self.assertEqual(reflection.respond, '')

    def test_blank_first_input_creates_record_at_react(self):
        response = self._submit('')

        self.assertEqual(response.text, PROMPTS[ReflectionStep.REACT])
        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.step, 'react')

    def test_missing_answer_at_review_sends_user_back(self):
        """A gap left by an earlier failure is repaired instead of synthesized."""
        DailyReflection.objects.create(
            user=self.user,
            reflection_date=self.today,
            step='learn',
            react='a',
            respond='',
            notice='c',
        )

        response = self._submit('d')

        self.assertEqual(response, PracticeResponse(PracticeResponse.QUESTION, PROMPTS[ReflectionStep.RESPOND]))
        self.generator.generate.assert_not_called()
        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.step, 'respond')
        self.assertEqual(reflection.learn, 'd')
        self.assertIsNone(reflection.daily_mirror)

    def test_repaired_gap_finishes_on_next_answer(self):
        DailyReflection.objects.create(
            user=self.user,
            reflection_date=self.today,
            step='review',
            react='a',
            respond='',
            notice='c',
            learn='d',
        )

        self.assertEqual(self._submit('YES').text, PROMPTS[ReflectionStep.RESPOND])
        response = self._submit('b')

        # respond -> notice; the later answers are already there
        self.assertEqual(response.text, PROMPTS[ReflectionStep.NOTICE])

    def test_generator_failure_can_be_retried_from_review(self):
        self._submit('a')
        self._submit('b')
        self._submit('c')
        self.generator.generate.side_effect = RuntimeError('upstream down')

        with self.assertRaises(RuntimeError):
            self._submit('d')

        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.step, 'review')
        self.assertEqual(reflection.learn, 'd')
        self.assertIsNone(reflection.daily_mirror)

        self.generator.generate.side_effect = None
        response = self._submit('YES')

        self.assertEqual(response.type, PracticeResponse.MIRROR)
        self.assertEqual(response.text, 'You caught yourself and came back.')

    def test_days_are_independent(self):
        self._submit('today')
        submit_answer(self.user, self.today + timedelta(days=1), 'tomorrow', generator=self.generator)

        self.assertEqual(DailyReflection.objects.filter(user=self.user).count(), 2)

    def test_mirror_is_cleaned_of_directives(self):
        self.generator.generate.return_value = 'You paused. You should rest.'

        response = self._answer_all()

        self.assertNotIn('should', response.text)

    def test_empty_mirror_is_not_stored_and_day_stays_retryable(self):
        """A mirror that is blank after cleanup leaves the day open at review."""
        self.generator.generate.return_value = 'Should try'

        with self.assertRaises(EmptyMirrorError):
            self._answer_all()

        reflection = DailyReflection.objects.get(user=self.user, reflection_date=self.today)
        self.assertEqual(reflection.step, 'review')
        self.assertIsNone(reflection.daily_mirror)

        self.generator.generate.return_value = 'A real mirror.'
        response = self._submit('YES')
        self.assertEqual(response, PracticeResponse(PracticeResponse.MIRROR, 'A real mirror.'))

        response = self._submit('YES')
        self.assertEqual(response, PracticeResponse(PracticeResponse.COMPLETED, 'A real mirror.'))
        self.assertEqual(self.generator.generate.call_count, 2)

    def test_racing_review_keeps_first_stored_mirror(self):
        """A mirror stored by another request while generating wins over ours."""
        reflection = DailyReflection.objects.create(
            user=self.user,
            reflection_date=self.today,
            step='review',
            react='a', respond='b', notice='c', learn='d',
        )

        def generate_while_other_request_finishes(prompt):
            DailyReflection.objects.filter(pk=reflection.pk).update(daily_mirror='First mirror.')
            return 'Second mirror.'

        self.generator.generate.side_effect = generate_while_other_request_finishes

        response = self._submit('YES')

        self.assertEqual(response.text, 'First mirror.')
        reflection.refresh_from_db()
        self.assertEqual(reflection.daily_mirror, 'First mirror.')


class DailyReflectionRepositoryTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='reflector')
        self.repository = DailyReflectionRepository()
        self.today = date(2025, 3, 3)

    def test_create_returns_existing_row_on_conflict(self):
        existing = DailyReflection.objects.create(user=self.user, reflection_date=self.today, react='kept')

        reflection = self.repository.create(self.user, self.today)

        self.assertEqual(reflection.pk, existing.pk)
        self.assertEqual(reflection.react, 'kept')

    def test_set_summary_only_writes_once(self):
        reflection = self.repository.create(self.user, self.today)

        first = self.repository.set_summary(reflection.pk, 'first')
        second = self.repository.set_summary(reflection.pk, 'second')

        self.assertEqual(first, 'first')
        self.assertEqual(second, 'first')

    def test_set_summary_replaces_empty_string(self):
        reflection = DailyReflection.objects.create(user=self.user, reflection_date=self.today, daily_mirror='')

        self.assertEqual(self.repository.set_summary(reflection.pk, 'filled'), 'filled')


    def test_update_field_rejects_non_answer_fields(self):
        reflection = self.repository.create(self.user, self.today)

        with self.assertRaises(ValueError):
            self.repository.update_field(reflection.pk, 'daily_mirror', 'sneaky')

    def test_updates_stamp_updated_at(self):
        reflection = self.repository.create(self.user, self.today)
        before = reflection.updated_at

        self.repository.update_step(reflection.pk, ReflectionStep.RESPOND)

        reflection.refresh_from_db()
        self.assertGreaterEqual(reflection.updated_at, before)
        self.assertEqual(reflection.step, 'respond')

    def test_list_dates_is_ascending(self):
        for offset in [2, 0, 1]:
            DailyReflection.objects.create(user=self.user, reflection_date=self.today + timedelta(days=offset))

        self.assertEqual(
            self.repository.list_dates(self.user),
            [self.today, self.today + timedelta(days=1), self.today + timedelta(days=2)],
        )

    def test_list_between_is_inclusive(self):
        for offset in [-1, 0, 6, 7]:
            DailyReflection.objects.create(user=self.user, reflection_date=self.today + timedelta(days=offset))

        reflections = self.repository.list_between(self.user, self.today, self.today + timedelta(days=6))

        self.assertEqual(
            [r.reflection_date for r in reflections],
            [self.today, self.today + timedelta(days=6)],
        )


class StreakTests(SimpleTestCase):

    def setUp(self):
        self.today = date(2025, 3, 10)

    def _days_ago(self, *offsets):
        return [self.today - timedelta(days=offset) for offset in offsets]

    def test_no_reflections(self):
        self.assertEqual(calculate_streak([], self.today), 0)

    def test_streak_including_today(self):
        self.assertEqual(calculate_streak(self._days_ago(0, 1, 2), self.today), 3)

    def test_streak_ending_yesterday_still_counts(self):
        self.assertEqual(calculate_streak(self._days_ago(1, 2), self.today), 2)

    def test_gap_breaks_streak(self):
        self.assertEqual(calculate_streak(self._days_ago(0, 1, 3, 4), self.today), 2)

    def test_last_reflection_two_days_ago_is_broken(self):
        self.assertEqual(calculate_streak(self._days_ago(2, 3, 4), self.today), 0)


class ReflectionStatsTests(TestCase):

    def test_stats(self):
        user = User.objects.create_user(username='reflector')
        today = date(2025, 3, 10)
        for offset in [0, 1, 5]:
            DailyReflection.objects.create(user=user, reflection_date=today - timedelta(days=offset))

        self.assertEqual(reflection_stats(user, today), {'currentStreak': 2, 'totalReflections': 3})
