"""
Test settings for the checkout webhook service.

These settings are used during test execution.
"""

from .base import *

# Use a simple secret key for tests
SECRET_KEY = "test-secret-key-not-for-production"  # noqa: S105

DEBUG = False

ALLOWED_HOSTS = ["testserver", "localhost"]

# Disable logging during tests
LOGGING = {
    "version": 1,
    "disable_existing_loggers": True,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "handlers": ["null"],
        "level": "DEBUG",
    },
}
