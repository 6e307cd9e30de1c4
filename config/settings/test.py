"""
Settings used by the test suite.

Fills in the required environment before the base settings read it.
"""
import os

os.environ.setdefault('DATABASE_URL', 'sqlite://:memory:')
os.environ.setdefault('SUPABASE_URL', 'https://example.supabase.co')
os.environ.setdefault('OPENAI_API_KEY', 'test-openai-key')

from .base import *  # noqa: E402,F403

DEBUG = False

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

# Run queued tasks inline so tests can assert on their effects
Q_CLUSTER = {
    **Q_CLUSTER,  # noqa: F405
    'sync': True,
}
