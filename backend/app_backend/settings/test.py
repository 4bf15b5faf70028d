from .settings import *

DEBUG = False
SECRET_KEY = "localride-test-key"

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels.layers.InMemoryChannelLayer",
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
RIDE_EMAILS_ENABLED = True
RIDE_EMAILS_ASYNC = False

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

LOGGING['root']['level'] = 'CRITICAL'
for _logger in LOGGING['loggers'].values():
    _logger['level'] = 'CRITICAL'
