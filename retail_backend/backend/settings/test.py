# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS
- In-memory SQLite (row locks are no-ops there; lock ordering is still exercised)
- Fast password hashing
- Throttling off so API tests are deterministic
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK

DEBUG = False

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

for _logger in LOGGING["loggers"].values():
    _logger["level"] = "CRITICAL"
