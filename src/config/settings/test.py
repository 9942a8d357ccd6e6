"""Test settings - uses SQLite for fast local testing."""
import os

os.environ.setdefault(
    "SECRET_KEY",
    "test-only-secret-key-4f9c2b7e1a6d8c3f5e0b9a2d7c4e1f8a6b3d",
)

from .base import *  # noqa: E402,F401,F403

DEBUG = True

# Use SQLite for tests (no PostgreSQL dependency)
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}
DATABASES["default"]["ATOMIC_REQUESTS"] = False

# Faster password hashing in tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Deterministic allow-list for the identity resolver tests
MANAGEMENT_EMAILS = ["vik@benchmarkbroker.com", "Wesley@BenchmarkBroker.com"]
MANAGEMENT_EMAILS_FILE = ""

# Disable API throttling in tests for deterministic runs
REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []  # noqa: F405
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}  # noqa: F405

# Disable logging noise during tests
LOGGING["root"]["level"] = "WARNING"  # noqa: F405
LOGGING["loggers"]["dashboard"]["handlers"] = ["console"]  # noqa: F405
LOGGING["loggers"]["dashboard"]["level"] = "WARNING"  # noqa: F405
LOGGING["loggers"]["dashboard"]["propagate"] = True  # noqa: F405
