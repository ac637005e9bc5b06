"""HTTP client for the Shippo API."""

from __future__ import annotations

from typing import Any

import httpx

from core.logging import get_logger
from core.result import Failure, Result, failure, success
from services.providers.errors import (
    AuthenticationError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    ParseError,
    ProviderError,
)

logger = get_logger(__name__)

PROVIDER_CODE = "shippo"

# Default timeout for API requests
DEFAULT_TIMEOUT = 30.0
# Base URL for Shippo API
BASE_URL = "https://api.goshippo.com"


class ShippoClient:
    """
    HTTP client for the Shippo API.

    Handles authentication and maps HTTP failures onto ProviderError.

    Attributes:
        api_key: Shippo API token (live or test).
        timeout: Request timeout in seconds.
    """

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        """
        Initialize Shippo client.

        Args:
            api_key: Shippo API token.
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

    @property
    def is_test(self) -> bool:
        """Check if the token is a Shippo test token."""
        return self.api_key.startswith("shippo_test_")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=BASE_URL,
                timeout=self.timeout,
                headers={
                    "Authorization": f"ShippoToken {self.api_key}",
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
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
            logger.error("Shippo request timeout", method=method, path=path)
            return failure(NetworkError(provider_code=PROVIDER_CODE, message="Request timeout"))
        except httpx.RequestError as e:
            logger.error("Shippo request error", method=method, path=path, error=str(e))
            return failure(
                NetworkError(
                    provider_code=PROVIDER_CODE,
                    message="Request failed",
                    details=str(e),
                )
            )

        if response.status_code >= 400:
            logger.error(
                "Shippo API error",
                method=method,
                path=path,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            return failure(self._status_error(response))

        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            logger.error("Failed to parse Shippo response", path=path, error=str(e))
            return failure(ParseError(provider_code=PROVIDER_CODE, details=str(e)))
        return success(data)

    @staticmethod
    def _status_error(response: httpx.Response) -> ProviderError:
        """Map an error status code onto a ProviderError."""
        details = response.text[:500]
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
        payload: dict[str, Any],
    ) -> Result[dict[str, Any], ProviderError]:
        """Create a shipment (rates are computed asynchronously)."""
        logger.info("Creating Shippo shipment", async_=payload.get("async"))
        return await self._make_request("POST", "/shipments/", payload)

    async def get_shipment(self, shipment_id: str) -> Result[dict[str, Any], ProviderError]:
        """Get a shipment by id."""
        return await self._make_request("GET", f"/shipments/{shipment_id}")

    async def get_rates(self, shipment_id: str) -> Result[dict[str, Any], ProviderError]:
        """
        Get every rate computed for a shipment.

        The rates collection is paginated; ``next`` links are followed and
        the pages are merged into a single ``results`` list.
        """
        path: str | None = f"/shipments/{shipment_id}/rates/"
        results: list[dict[str, Any]] = []
        while path:
            page = await self._make_request("GET", path)
            if isinstance(page, Failure):
                return page
            results.extend(page.value.get("results") or [])
            path = page.value.get("next")
        return success({"results": results})

    async def create_customs_item(
        self,
        payload: dict[str, Any],
    ) -> Result[dict[str, Any], ProviderError]:
        """Create a customs item."""
        return await self._make_request("POST", "/customs/items/", payload)

    async def create_customs_declaration(
        self,
        payload: dict[str, Any],
    ) -> Result[dict[str, Any], ProviderError]:
        """Create a customs declaration."""
        logger.info("Creating Shippo customs declaration", items=len(payload.get("items", [])))
        return await self._make_request("POST", "/customs/declarations/", payload)
