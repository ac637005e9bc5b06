"""Tests for the request logging middleware."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import structlog
from django.http import HttpRequest, HttpResponse
from django.test import RequestFactory

from core.middleware import RequestLoggingMiddleware


class TestRequestLoggingMiddleware:
    """Tests for RequestLoggingMiddleware."""

    def test_binds_request_context(self) -> None:
        """Handlers see the request id, path and method."""
        seen: dict[str, Any] = {}

        def handler(request: HttpRequest) -> HttpResponse:
            seen.update(structlog.contextvars.get_contextvars())
            return HttpResponse(status=201)

        middleware = RequestLoggingMiddleware(handler)
        response = middleware(RequestFactory().post("/webhooks/snipcart"))

        assert response.status_code == 201
        assert seen["path"] == "/webhooks/snipcart"
        assert seen["method"] == "POST"
        assert len(seen["request_id"]) == 32

    def test_logs_status_and_timing(self) -> None:
        """One event per request carries the status code and timing."""
        middleware = RequestLoggingMiddleware(lambda request: HttpResponse(status=400))

        with patch("core.middleware.logger") as mock_logger:
            middleware(RequestFactory().get("/health/"))

        mock_logger.info.assert_called_once()
        args, kwargs = mock_logger.info.call_args
        assert args == ("Request handled",)
        assert kwargs["status_code"] == 400
        assert kwargs["response_time_ms"] >= 0

    def test_context_cleared_after_request(self) -> None:
        """Request context does not leak past the request."""
        middleware = RequestLoggingMiddleware(lambda request: HttpResponse())

        middleware(RequestFactory().get("/health/"))

        assert structlog.contextvars.get_contextvars() == {}
