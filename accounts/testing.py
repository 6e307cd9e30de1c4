"""Helpers for tests that call the bearer-protected API."""
from unittest.mock import patch

import jwt

from django.contrib.auth import get_user_model

User = get_user_model()

TEST_TOKEN = 'test-token'


class BearerAuthMixin:
    """
    Skips JWKS verification: any request carrying TEST_TOKEN authenticates as
    the subject in `token_claims`.
    """
    token_claims = {'sub': 'user-123', 'email': 'test@example.com'}

    def setUp(self):
        super().setUp()
        patcher = patch('accounts.auth.decode_access_token', side_effect=self._decode)
        self.mock_decode = patcher.start()
        self.addCleanup(patcher.stop)

    def _decode(self, token):
        if token != TEST_TOKEN:
            raise jwt.InvalidTokenError('bad token')
        return dict(self.token_claims)

    @property
    def auth_headers(self):
        return {'HTTP_AUTHORIZATION': f'Bearer {TEST_TOKEN}'}

    def get_auth_user(self):
        return User.objects.get(username=self.token_claims['sub'])
