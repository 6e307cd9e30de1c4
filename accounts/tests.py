"""
Tests for the accounts app.

Covers:
- Profile creation via signals
- Bearer token verification against the identity provider's keys
- The bearer_auth_required decorator
- Preference reads and updates
"""
import json
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest.mock import Mock, patch

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa
from django.conf import settings
from django.contrib.auth import get_user_model
from django.test import TestCase

from .auth import decode_access_token
from .models import UserProfile
from .testing import BearerAuthMixin, TEST_TOKEN

User = get_user_model()


class UserProfileSignalTests(TestCase):
    """Test that UserProfile is automatically created when User is created."""

    def test_profile_created_on_user_creation(self):
        """Creating a user creates a profile with default preferences."""
        user = User.objects.create_user(username='testuser', email='test@example.com')

        self.assertIsInstance(user.profile, UserProfile)
        self.assertEqual(user.profile.timezone, 'UTC')
        self.assertTrue(user.profile.weekly_summary_enabled)
        self.assertFalse(user.profile.share_weekly_summary)
        self.assertFalse(user.profile.shares_with_coach)

    def test_profile_not_duplicated_on_user_save(self):
        """Saving a user again doesn't create a second profile."""
        user = User.objects.create_user(username='testuser', email='test@example.com')
        profile_id = user.profile.id

        user.email = 'newemail@example.com'
        user.save()

        user.refresh_from_db()
        self.assertEqual(user.profile.id, profile_id)
        self.assertEqual(UserProfile.objects.filter(user=user).count(), 1)


class DecodeAccessTokenTests(TestCase):
    """Token verification against a signing key served by a stubbed JWKS client."""

    def setUp(self):
        self.private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        jwks_client = Mock()
        jwks_client.get_signing_key_from_jwt.return_value = Mock(key=self.private_key.public_key())
        patcher = patch('accounts.auth.get_jwks_client', return_value=jwks_client)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _token(self, **overrides):
        claims = {
            'sub': 'user-abc',
            'email': 'abc@example.com',
            'aud': 'authenticated',
            'iss': f'{settings.SUPABASE_URL}/auth/v1',
            'exp': datetime.now(dt_timezone.utc) + timedelta(hours=1),
        }
        claims.update(overrides)
        return jwt.encode(claims, self.private_key, algorithm='RS256')

    def test_valid_token_returns_claims(self):
        claims = decode_access_token(self._token())

        self.assertEqual(claims['sub'], 'user-abc')
        self.assertEqual(claims['email'], 'abc@example.com')

    def test_expired_token_is_rejected(self):
        token = self._token(exp=datetime.now(dt_timezone.utc) - timedelta(minutes=5))

        with self.assertRaises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_wrong_audience_is_rejected(self):
        with self.assertRaises(jwt.InvalidAudienceError):
            decode_access_token(self._token(aud='anon'))

    def test_wrong_issuer_is_rejected(self):
        with self.assertRaises(jwt.InvalidIssuerError):
            decode_access_token(self._token(iss='https://evil.example.com/auth/v1'))

    def test_token_signed_with_another_key_is_rejected(self):
        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        token = jwt.encode(
            {
                'sub': 'user-abc',
                'aud': 'authenticated',
                'iss': f'{settings.SUPABASE_URL}/auth/v1',
                'exp': datetime.now(dt_timezone.utc) + timedelta(hours=1),
            },
            other_key,
            algorithm='RS256',
        )

        with self.assertRaises(jwt.InvalidSignatureError):
            decode_access_token(token)


class BearerAuthRequiredTests(BearerAuthMixin, TestCase):
    """The decorator guards every practice endpoint."""

    def test_missing_header_returns_401(self):
        response = self.client.get('/practice/reflections')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Missing or invalid authorization header'})

    def test_non_bearer_header_returns_401(self):
        response = self.client.get('/practice/reflections', HTTP_AUTHORIZATION='Basic abc123')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Missing or invalid authorization header'})

    def test_invalid_token_returns_401(self):
        response = self.client.get('/practice/reflections', HTTP_AUTHORIZATION='Bearer not-the-token')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'error': 'Invalid or expired token'})
        self.assertFalse(User.objects.exists())

    def test_valid_token_registers_user_on_first_request(self):
        response = self.client.get('/practice/reflections', **self.auth_headers)

        self.assertEqual(response.status_code, 200)
        user = self.get_auth_user()
        self.assertEqual(user.email, 'test@example.com')
        self.assertTrue(hasattr(user, 'profile'))

    def test_same_subject_maps_to_same_user(self):
        self.client.get('/practice/reflections', **self.auth_headers)
        self.client.get('/practice/reflections', **self.auth_headers)

        self.assertEqual(User.objects.filter(username='user-123').count(), 1)

    def test_disabled_user_is_rejected(self):
        User.objects.create_user(username='user-123', email='test@example.com', is_active=False)

        response = self.client.get('/practice/reflections', **self.auth_headers)

        self.assertEqual(response.status_code, 401)


class PreferencesApiTests(BearerAuthMixin, TestCase):
    """GET and POST /accounts/preferences/."""

    url = '/accounts/preferences/'

    def _post(self, data):
        return self.client.post(
            self.url,
            data=json.dumps(data),
            content_type='application/json',
            **self.auth_headers,
        )

    def test_get_returns_defaults(self):
        response = self.client.get(self.url, **self.auth_headers)

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['timezone'], 'UTC')
        self.assertTrue(data['weekly_summary_enabled'])
        self.assertFalse(data['share_weekly_summary'])

    def test_partial_update_keeps_other_fields(self):
        self._post({'timezone': 'Europe/Berlin'})

        response = self._post({'coach_name': 'Sam'})

        self.assertEqual(response.status_code, 200)
        profile = self.get_auth_user().profile
        self.assertEqual(profile.timezone, 'Europe/Berlin')
        self.assertEqual(profile.coach_name, 'Sam')
        self.assertTrue(profile.weekly_summary_enabled)

    def test_share_with_coach(self):
        response = self._post({
            'coach_email': 'coach@example.com',
            'share_weekly_summary': True,
        })

        self.assertEqual(response.status_code, 200)
        self.assertTrue(self.get_auth_user().profile.shares_with_coach)

    def test_sharing_without_coach_email_is_rejected(self):
        response = self._post({'share_weekly_summary': True})

        self.assertEqual(response.status_code, 400)
        self.assertIn('coach_email', response.json()['error'])

    def test_unknown_timezone_is_rejected(self):
        response = self._post({'timezone': 'Mars/Olympus_Mons'})

        self.assertEqual(response.status_code, 400)
        self.assertIn('timezone', response.json()['fields'])

    def test_invalid_json_returns_400(self):
        response = self.client.post(
            self.url,
            data='{not json',
            content_type='application/json',
            **self.auth_headers,
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'error': 'Invalid JSON'})

    def test_requires_authentication(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 401)

    def test_token_constant_matches_header(self):
        self.assertEqual(self.auth_headers['HTTP_AUTHORIZATION'], f'Bearer {TEST_TOKEN}')
