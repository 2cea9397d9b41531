# config/settings/test.py
from .base import *  # noqa

DEBUG = False
SECRET_KEY = "test-secret-key"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Keep hashing cheap in tests; production cost comes from the environment.
PASSWORD_HASH_ITERATIONS = 1000

JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length-for-hs256"
JWT_TTL_SECONDS = 86400
SIMPLE_JWT["SIGNING_KEY"] = JWT_SECRET_KEY  # noqa: F405

TIME_ZONE = "UTC"

LOGGING["loggers"]["em_core"]["level"] = "WARNING"  # noqa: F405
