"""
Base Django settings for the checkout webhook service.

Environment-specific modules (development, production, test) star-import
this module and override what differs. Application configuration lives in
core.config and is loaded through pydantic-settings.
"""

from pathlib import Path

from core.config import get_settings

BASE_DIR = Path(__file__).resolve().parent.parent.parent

APP_SETTINGS = get_settings()

SECRET_KEY = APP_SETTINGS.secret_key.get_secret_value()

DEBUG = APP_SETTINGS.debug

ALLOWED_HOSTS = APP_SETTINGS.allowed_hosts

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "drf_spectacular",
    "apps.webhooks",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "core.middleware.RequestLoggingMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "core.urls"

WSGI_APPLICATION = "core.wsgi.application"

# No persistence: shipment identity travels in the client-supplied rate id.
DATABASES: dict[str, dict[str, str]] = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Snipcart posts to /webhooks/snipcart without a trailing slash.
APPEND_SLASH = False

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "COERCE_DECIMAL_TO_STRING": False,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Checkout Webhooks API",
    "DESCRIPTION": "Shipping rate and tax webhooks for Snipcart checkouts",
    "VERSION": APP_SETTINGS.build_version,
    "SERVE_INCLUDE_SCHEMA": False,
}
