"""
Django test settings for the Abbey project.
Overrides main settings for testing.
"""

from .settings import *

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

TEST_RUNNER = 'django.test.runner.DiscoverRunner'

# Use faster password hasher for tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

GOOGLE_CLIENT_ID = 'test-client-id'
GOOGLE_CLIENT_SECRET = 'test-client-secret'
GOOGLE_REDIRECT_URI = 'http://testserver/api/auth/google/callback/'

CLIENT_URL = 'http://localhost:5173'

SIMPLE_JWT = {
    **SIMPLE_JWT,
    'SIGNING_KEY': 'test-signing-key-with-enough-length-for-hs256',
}

# Use a simpler logging setup for tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': True,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['null'],
            'propagate': False,
            'level': 'INFO',
        },
        'abbey': {
            'handlers': ['null'],
            'propagate': False,
            'level': 'INFO',
        },
    },
}
