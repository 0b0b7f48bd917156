"""
Settings per i test (pytest-django / manage.py test).
"""

from .base import *  # noqa: F401,F403

DEBUG = False
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

DRAFT_AUTOSAVE_DEBOUNCE_SECONDS = 2
PORTAL_BASE_URL = "https://beeri.online"

LOGGING["root"]["level"] = "CRITICAL"  # noqa: F405
