from .base import *

DEBUG = False

SECRET_KEY = 'hostel-test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'ATOMIC_REQUESTS': True,
    }
}

# Speed up tests
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

LOGGING['loggers']['apps']['level'] = 'WARNING'
LOGGING['loggers']['django']['level'] = 'WARNING'
