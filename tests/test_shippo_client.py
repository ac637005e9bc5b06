"""Tests for the Shippo HTTP client."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from core.result import Failure, Success
from services.providers.errors import ErrorCode
from services.providers.shippo.client import ShippoClient


class TestShippoClientInit:
    """Tests for ShippoClient initialization."""

    def test_init_with_key(self) -> None:
        """Client keeps its key and timeout."""
        client = ShippoClient(api_key="shippo_test_abc", timeout=5.0)

        assert client.api_key == "shippo_test_abc"
        assert client.timeout == 5.0
        assert client.is_test is True

    def test_live_key(self) -> None:
        """Live tokens are not test tokens."""
        assert ShippoClient(api_key="shippo_live_abc").is_test is False

    def test_init_with_empty_key_raises(self) -> None:
        """Client should raise ValueError for an empty key."""
        with pytest.raises(ValueError, match="api_key is required"):
            ShippoClient(api_key="")


class TestShippoClientRequests:
    """Tests for request handling and error mapping."""

    @pytest.fixture()
    def client(self) -> ShippoClient:
        """Create a client for testing."""
        return ShippoClient(api_key="shippo_test_abc")

    @pytest.mark.asyncio
    async def test_create_shipment_success(self, client: ShippoClient) -> None:
        """create_shipment posts the payload and returns the body."""
        mock_response = MagicMock()
        mock_response.status_code = 201
        mock_response.json.return_value = {"object_id": "shp-1", "status": "QUEUED"}

        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.return_value = mock_response
            mock_get_client.return_value = mock_http

            result = await client.create_shipment({"async": True})

            assert isinstance(result, Success)
            assert result.value["object_id"] == "shp-1"
            mock_http.request.assert_awaited_once_with(
                method="POST", url="/shipments/", json={"async": True}
            )

    @pytest.mark.asyncio
    async def test_get_rates_path(self, client: ShippoClient) -> None:
        """get_rates reads the shipment's rates collection."""
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.return_value = {"results": []}

        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.return_value = mock_response
            mock_get_client.return_value = mock_http

            await client.get_rates("shp-1")

            mock_http.request.assert_awaited_once_with(
                method="GET", url="/shipments/shp-1/rates/", json=None
            )

    @pytest.mark.asyncio
    async def test_get_rates_follows_next_page(self, client: ShippoClient) -> None:
        """Paginated rates are merged across pages."""
        next_url = "https://api.goshippo.com/shipments/shp-1/rates/?page=2"
        first_page = MagicMock()
        first_page.status_code = 200
        first_page.json.return_value = {"next": next_url, "results": [{"object_id": "rate-1"}]}
        second_page = MagicMock()
        second_page.status_code = 200
        second_page.json.return_value = {"next": None, "results": [{"object_id": "rate-2"}]}

        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.side_effect = [first_page, second_page]
            mock_get_client.return_value = mock_http

            result = await client.get_rates("shp-1")

        assert isinstance(result, Success)
        assert [r["object_id"] for r in result.value["results"]] == ["rate-1", "rate-2"]
        assert mock_http.request.await_args_list[1].kwargs["url"] == next_url

    @pytest.mark.asyncio
    async def test_get_rates_page_failure(self, client: ShippoClient) -> None:
        """A failing later page fails the whole read."""
        first_page = MagicMock()
        first_page.status_code = 200
        first_page.json.return_value = {"next": "/shipments/shp-1/rates/?page=2", "results": []}
        second_page = MagicMock()
        second_page.status_code = 500
        second_page.text = "upstream error"

        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.side_effect = [first_page, second_page]
            mock_get_client.return_value = mock_http

            result = await client.get_rates("shp-1")

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.NETWORK

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status_code", "code"),
        [
            (401, ErrorCode.AUTHENTICATION),
            (403, ErrorCode.AUTHENTICATION),
            (404, ErrorCode.NOT_FOUND),
            (400, ErrorCode.INVALID_REQUEST),
            (500, ErrorCode.NETWORK),
        ],
    )
    async def test_status_errors(
        self, client: ShippoClient, status_code: int, code: ErrorCode
    ) -> None:
        """HTTP error statuses map onto error codes."""
        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.text = "error body"

        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.return_value = mock_response
            mock_get_client.return_value = mock_http

            result = await client.get_shipment("shp-1")

            assert isinstance(result, Failure)
            assert result.error.code == code
            assert result.error.provider_code == "shippo"

    @pytest.mark.asyncio
    async def test_timeout(self, client: ShippoClient) -> None:
        """Timeouts are network errors."""
        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.side_effect = httpx.TimeoutException("Timeout")
            mock_get_client.return_value = mock_http

            result = await client.get_shipment("shp-1")

            assert isinstance(result, Failure)
            assert result.error.code == ErrorCode.NETWORK
            assert result.error.message == "Request timeout"

    @pytest.mark.asyncio
    async def test_request_error(self, client: ShippoClient) -> None:
        """Connection failures are network errors."""
        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.side_effect = httpx.RequestError("Connection failed")
            mock_get_client.return_value = mock_http

            result = await client.get_shipment("shp-1")

            assert isinstance(result, Failure)
            assert result.error.code == ErrorCode.NETWORK

    @pytest.mark.asyncio
    async def test_invalid_json(self, client: ShippoClient) -> None:
        """Unparseable bodies are parse errors."""
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.side_effect = ValueError("not json")

        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.return_value = mock_response
            mock_get_client.return_value = mock_http

            result = await client.get_shipment("shp-1")

            assert isinstance(result, Failure)
            assert result.error.code == ErrorCode.PARSE

    @pytest.mark.asyncio
    async def test_close(self, client: ShippoClient) -> None:
        """close releases the HTTP client."""
        http = await client._get_client()
        assert http.headers["Authorization"] == "ShippoToken shippo_test_abc"

        await client.close()

        assert client._client is None
