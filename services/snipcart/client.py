"""HTTP client for Snipcart request validation."""

from __future__ import annotations

import httpx

from core.logging import get_logger
from core.result import Result, failure, success

logger = get_logger(__name__)

# Default timeout for API requests
DEFAULT_TIMEOUT = 10.0


class RequestValidationError(Exception):
    """The webhook request token could not be validated."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize with error message and upstream status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SnipcartClient:
    """
    Client for Snipcart's request validation endpoint.

    Every webhook carries an ``X-Snipcart-RequestToken`` header; Snipcart
    confirms the token was issued by it when we GET the validation URL with
    the token appended, authenticated with our secret API key.
    """

    def __init__(
        self,
        api_key: str,
        validation_url: str,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Initialize the Snipcart client.

        Args:
            api_key: Snipcart secret API key.
            validation_url: Validation endpoint; the token is appended to it.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key
        self.validation_url = validation_url
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                auth=httpx.BasicAuth(self.api_key, ""),
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def validate_token(self, token: str) -> Result[None, RequestValidationError]:
        """
        Check that a webhook request token was issued by Snipcart.

        Args:
            token: Value of the X-Snipcart-RequestToken header.

        Returns:
            Success(None) for a valid token, otherwise RequestValidationError.
        """
        client = await self._get_client()

        try:
            response = await client.get(f"{self.validation_url}{token}")
        except httpx.HTTPError as e:
            logger.warning("Snipcart token validation request failed", error=str(e))
            return failure(RequestValidationError(f"error validating webhook: {e}"))

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Snipcart rejected request token",
                status_code=response.status_code,
            )
            return failure(
                RequestValidationError(
                    f"non-2XX status code for validating webhook: {response.status_code}",
                    status_code=response.status_code,
                )
            )

        logger.debug("Validated webhook request token")
        return success(None)
