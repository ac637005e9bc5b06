"""HTTP client for the EasyPost API."""

from __future__ import annotations

from typing import Any

import httpx

from core.logging import get_logger
from core.result import Result, failure, success
from services.providers.errors import (
    AuthenticationError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    ParseError,
    ProviderError,
)

logger = get_logger(__name__)

PROVIDER_CODE = "easypost"

# Default timeout for API requests
DEFAULT_TIMEOUT = 30.0
# Base URL for EasyPost API
BASE_URL = "https://api.easypost.com/v2"


class EasyPostClient:
    """
    HTTP client for the EasyPost API.

    EasyPost authenticates with HTTP basic auth using the API key as the
    username and wraps every request body in the object name
    (``{"shipment": {...}}``).

    Attributes:
        api_key: EasyPost API key.
        timeout: Request timeout in seconds.
    """

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        """
        Initialize EasyPost client.

        Args:
            api_key: EasyPost API key.
            timeout: Request timeout in seconds.

        Raises:
            ValueError: If api_key is empty.
        """
        if not api_key:
            msg = "api_key is required"
            raise ValueError(msg)

        self.api_key = api_key
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=BASE_URL,
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

    async def _make_request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> Result[dict[str, Any], ProviderError]:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method.
            path: API path.
            payload: JSON body.

        Returns:
            Result containing response data or ProviderError.
        """
        client = await self._get_client()

        try:
            response = await client.request(method=method, url=path, json=payload)
        except httpx.TimeoutException:
            logger.error("EasyPost request timeout", method=method, path=path)
            return failure(NetworkError(provider_code=PROVIDER_CODE, message="Request timeout"))
        except httpx.RequestError as e:
            logger.error("EasyPost request error", method=method, path=path, error=str(e))
            return failure(
                NetworkError(
                    provider_code=PROVIDER_CODE,
                    message="Request failed",
                    details=str(e),
                )
            )

        if response.status_code >= 400:
            logger.error(
                "EasyPost API error",
                method=method,
                path=path,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            return failure(self._status_error(response))

        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            logger.error("Failed to parse EasyPost response", path=path, error=str(e))
            return failure(ParseError(provider_code=PROVIDER_CODE, details=str(e)))
        return success(data)

    @staticmethod
    def _status_error(response: httpx.Response) -> ProviderError:
        """Map an error status code onto a ProviderError."""
        details = response.text[:500]
        try:
            message = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            message = f"API returned status {response.status_code}"

        if response.status_code in (401, 403):
            return AuthenticationError(PROVIDER_CODE, message=message, details=details)
        if response.status_code == 404:
            return NotFoundError(PROVIDER_CODE, message=message, details=details)
        if response.status_code < 500:
            return InvalidRequestError(PROVIDER_CODE, message=message, details=details)
        return NetworkError(PROVIDER_CODE, message=message, details=details)

    async def create_shipment(
        self,
        shipment: dict[str, Any],
    ) -> Result[dict[str, Any], ProviderError]:
        """Create a shipment; EasyPost rates it synchronously."""
        logger.info("Creating EasyPost shipment")
        return await self._make_request("POST", "/shipments", {"shipment": shipment})

    async def get_shipment(self, shipment_id: str) -> Result[dict[str, Any], ProviderError]:
        """Get a shipment (including its rates) by id."""
        return await self._make_request("GET", f"/shipments/{shipment_id}")

    async def create_customs_item(
        self,
        customs_item: dict[str, Any],
    ) -> Result[dict[str, Any], ProviderError]:
        """Create a customs item."""
        return await self._make_request("POST", "/customs_items", {"customs_item": customs_item})

    async def create_customs_info(
        self,
        customs_info: dict[str, Any],
    ) -> Result[dict[str, Any], ProviderError]:
        """Create a customs info (EasyPost's customs declaration)."""
        logger.info(
            "Creating EasyPost customs info",
            items=len(customs_info.get("customs_items", [])),
        )
        return await self._make_request("POST", "/customs_infos", {"customs_info": customs_info})
