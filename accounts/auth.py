"""
Bearer token authentication for the JSON API.

Tokens are issued by the identity provider (Supabase auth) and verified here
against the signing keys it publishes at `/auth/v1/.well-known/jwks.json`.
The token subject is mapped onto a Django user so the rest of the app can use
ordinary foreign keys.
"""
from functools import lru_cache, wraps
from typing import Any, Dict

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AbstractUser
from django.http import HttpRequest, JsonResponse

import logging
logger = logging.getLogger(__name__)

User = get_user_model()

SIGNING_ALGORITHMS = ['RS256', 'ES256']


@lru_cache(maxsize=1)
def get_jwks_client() -> jwt.PyJWKClient:
    """The JWKS client is built once; it caches the fetched key set itself."""
    return jwt.PyJWKClient(f"{settings.SUPABASE_URL}/auth/v1/.well-known/jwks.json")


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token and return its claims.

    Raises:
        jwt.PyJWTError: signature, expiry, audience, issuer or key lookup failed
    """
    signing_key = get_jwks_client().get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=SIGNING_ALGORITHMS,
        audience=settings.SUPABASE_JWT_AUDIENCE,
        issuer=f"{settings.SUPABASE_URL}/auth/v1",
        options={'require': ['exp', 'sub']},
    )


def get_or_create_user_for_claims(claims: Dict[str, Any]) -> AbstractUser:
    """Map the token subject onto a local user, creating it on first sight."""
    user, created = User.objects.get_or_create(
        username=claims['sub'],
        defaults={'email': claims.get('email') or ''},
    )
    if created:
        logger.info(f"Registered user {user.username} from identity provider")
    return user


def bearer_auth_required(view_func):
    """Reject requests without a valid bearer token before the view runs."""
    @wraps(view_func)
    def _wrapped_view(request: HttpRequest, *args, **kwargs):
        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer ') or not auth_header[len('Bearer '):].strip():
            return JsonResponse({'error': 'Missing or invalid authorization header'}, status=401)

        token = auth_header[len('Bearer '):].strip()

        try:
            claims = decode_access_token(token)
        except jwt.PyJWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            return JsonResponse({'error': 'Invalid or expired token'}, status=401)

        user = get_or_create_user_for_claims(claims)
        if not user.is_active:
            return JsonResponse({'error': 'Account is disabled'}, status=401)

        request.user = user
        return view_func(request, *args, **kwargs)
    return _wrapped_view
