"""Production overrides: Redis-backed channels, SMTP email through Celery."""

from .settings import *
import os

DEBUG = False
SECRET_KEY = os.environ["DJANGO_SECRET_KEY"]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "").split(',') if h.strip()]

# Browser clients are served from a known frontend origin only
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", "").split(',') if o.strip()
]

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

CHANNEL_LAYERS = {
    "default": {
        "BACKEND": "channels_redis.core.RedisChannelLayer",
        "CONFIG": {
            "hosts": [REDIS_URL],
            "capacity": int(os.getenv("CHANNELS_CAPACITY", 1500)),
            "expiry": 30,
        },
    }
}

EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
RIDE_EMAILS_ASYNC = os.getenv("RIDE_EMAILS_ASYNC", "True") == "True"

LOGGING['root']['level'] = os.getenv("LOG_LEVEL", "WARNING")
