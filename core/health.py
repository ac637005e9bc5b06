"""Health check endpoint for monitoring."""

from django.http import JsonResponse

from core.config import get_settings


def health_check(_request: object) -> JsonResponse:
    """
    Liveness endpoint reporting the running build.

    Args:
        _request: Django HTTP request object (unused but required by Django).

    Returns:
        JsonResponse with readiness message and build version.
    """
    return JsonResponse(
        {"message": "ready", "version": get_settings().build_version},
        status=200,
    )
