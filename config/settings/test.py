"""
Test settings for the Format Converter project.
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['localhost', 'testserver']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

STORAGES['staticfiles'] = {
    'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# Never talk to a real provider from the test suite
FORMAT_CONVERTER_API_KEY = ''
FORMAT_CONVERTER_API_URL = 'https://llm.invalid/v1/chat/completions'

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    'DEFAULT_THROTTLE_RATES': {
        'conversion': '1000/minute',
    },
}

LOGGING['handlers']['file'] = {
    'class': 'logging.NullHandler',
}
