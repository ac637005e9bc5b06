"""Request logging middleware."""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

from core.logging import bind_context, clear_context, get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from django.http import HttpRequest, HttpResponse

logger = get_logger(__name__)


class RequestLoggingMiddleware:
    """
    Log one structured event per request.

    Binds a request id for the lifetime of the request so that every event
    logged while handling a webhook can be correlated.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        """Store the next handler in the chain."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Handle the request and log its outcome."""
        clear_context()
        bind_context(request_id=uuid.uuid4().hex, path=request.path, method=request.method)
        started = time.perf_counter()
        try:
            response = self.get_response(request)
            logger.info(
                "Request handled",
                status_code=response.status_code,
                response_time_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return response
        finally:
            clear_context()
