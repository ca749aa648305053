"""
Test settings for the task board

This module contains Django settings specifically for running tests.
It overrides certain production settings to make testing faster and more reliable.
"""

import os

from .settings import *

# Test Database - Use in-memory SQLite for faster tests, unless a Postgres
# host is given explicitly (needed for the concurrent move tests)
if os.getenv("TEST_POSTGRES_HOST"):
    DATABASES["default"]["HOST"] = os.getenv("TEST_POSTGRES_HOST")
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }

# Disable migrations for faster tests
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None

MIGRATION_MODULES = DisableMigrations()

# Use memory cache for tests
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

# Use memory event publisher for tests (no Kafka dependency)
EVENT_PUBLISHER_TYPE = 'memory'
AUDIT_SINK_TYPE = 'database'

# Run Celery tasks inline
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Drift repair is exercised explicitly in tests
BOARD_REPAIR_DRIFT_ON_READ = False

# Use simple JWT settings for tests
SIMPLE_JWT.update({
    'ALGORITHM': 'HS256',
    'SIGNING_KEY': SECRET_KEY,
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=60),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=1),
})

# Faster password hashing for tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

DEBUG = False

# Test-specific logging
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
}

CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer',
    }
}

