"""Tests for the EasyPost client and adapter."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.result import Failure, Success, success
from services.providers.base import (
    CustomsItem,
    Parcel,
    RateProvider,
    ShipmentAddress,
    ShipmentRequest,
    ShipmentStatus,
    TaxIdentifier,
    TaxIdType,
)
from services.providers.easypost import EasyPostAdapter, EasyPostClient
from services.providers.easypost.adapter import to_inches, to_ounces
from services.providers.errors import ErrorCode


class TestUnitConversion:
    """Tests for to_ounces and to_inches."""

    def test_grams(self) -> None:
        """Grams are divided by 28.35."""
        assert to_ounces(Decimal("700"), "g") == Decimal("24.69")

    def test_kilograms(self) -> None:
        """Kilograms go through grams."""
        assert to_ounces(Decimal("1"), "kg") == Decimal("35.27")

    def test_pounds(self) -> None:
        """A pound is sixteen ounces."""
        assert to_ounces(Decimal("2"), "lb") == Decimal("32.00")

    def test_ounces_unchanged(self) -> None:
        """Ounces pass through."""
        assert to_ounces(Decimal("5"), "oz") == Decimal("5")

    def test_centimeters(self) -> None:
        """Centimeters are divided by 2.54."""
        assert to_inches(Decimal("30"), "cm") == Decimal("11.81")

    def test_inches_unchanged(self) -> None:
        """Inches pass through."""
        assert to_inches(Decimal("12"), "in") == Decimal("12")


class TestEasyPostClient:
    """Tests for EasyPostClient."""

    def test_init_with_empty_key_raises(self) -> None:
        """Client should raise ValueError for an empty key."""
        with pytest.raises(ValueError, match="api_key is required"):
            EasyPostClient(api_key="")

    @pytest.mark.asyncio
    async def test_wraps_body_in_object_name(self) -> None:
        """Request bodies are wrapped in the object name."""
        client = EasyPostClient(api_key="EZTK123")
        mock_response = MagicMock()
        mock_response.status_code = 201
        mock_response.json.return_value = {"id": "cstitem_1"}

        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.return_value = mock_response
            mock_get_client.return_value = mock_http

            result = await client.create_customs_item({"description": "Mug"})

            assert isinstance(result, Success)
            mock_http.request.assert_awaited_once_with(
                method="POST",
                url="/customs_items",
                json={"customs_item": {"description": "Mug"}},
            )

    @pytest.mark.asyncio
    async def test_error_message_from_body(self) -> None:
        """EasyPost error messages are surfaced."""
        client = EasyPostClient(api_key="EZTK123")
        mock_response = MagicMock()
        mock_response.status_code = 422
        mock_response.text = "{}"
        mock_response.json.return_value = {"error": {"message": "Invalid address"}}

        with patch.object(client, "_get_client") as mock_get_client:
            mock_http = AsyncMock()
            mock_http.request.return_value = mock_response
            mock_get_client.return_value = mock_http

            result = await client.create_shipment({})

            assert isinstance(result, Failure)
            assert result.error.code == ErrorCode.INVALID_REQUEST
            assert result.error.message == "Invalid address"


@pytest.fixture()
def client() -> MagicMock:
    """Return a mocked EasyPost client."""
    client = MagicMock()
    client.close = AsyncMock()
    return client


@pytest.fixture()
def adapter(client: MagicMock) -> EasyPostAdapter:
    """Return an adapter over the mocked client."""
    return EasyPostAdapter(client, poll_interval=0.01)


class TestEasyPostAdapter:
    """Tests for EasyPostAdapter."""

    def test_conforms_to_protocol(self, adapter: EasyPostAdapter) -> None:
        """The adapter is a RateProvider."""
        assert isinstance(adapter, RateProvider)
        assert adapter.provider_code == "easypost"

    @pytest.mark.asyncio
    async def test_create_shipment_payload(
        self, adapter: EasyPostAdapter, client: MagicMock
    ) -> None:
        """Units are converted and IOSS ids are sent on the shipment."""
        client.create_shipment = AsyncMock(
            return_value=success({"id": "shp_1", "rates": []})
        )
        request = ShipmentRequest(
            address_from=ShipmentAddress(name="Jane", street1="10 Rd", city="Concord", country="US"),
            address_to=ShipmentAddress(name="Jon Doe", street1="1 Str", city="Berlin", country="DE"),
            parcel=Parcel(
                length=Decimal("30"),
                width=Decimal("20"),
                height=Decimal("10"),
                distance_unit="cm",
                weight=Decimal("700"),
                mass_unit="g",
            ),
            customs_declaration_id="cstinfo_1",
            tax_identifiers=(
                TaxIdentifier(number="IM1", id_type=TaxIdType.IOSS, issuing_country="ES"),
            ),
        )

        result = await adapter.create_shipment(request)

        assert isinstance(result, Success)
        assert result.value.status == ShipmentStatus.SUCCESS
        shipment = client.create_shipment.await_args.args[0]
        assert shipment["parcel"] == {
            "length": "11.81",
            "width": "7.87",
            "height": "3.94",
            "weight": "24.69",
        }
        assert shipment["customs_info"] == {"id": "cstinfo_1"}
        assert shipment["tax_identifiers"] == [
            {
                "entity": "SENDER",
                "tax_id": "IM1",
                "tax_id_type": "IOSS",
                "issuing_country": "ES",
            }
        ]

    @pytest.mark.asyncio
    async def test_shipment_without_rates_is_queued(
        self, adapter: EasyPostAdapter, client: MagicMock
    ) -> None:
        """A shipment is pending until rates are attached."""
        client.get_shipment = AsyncMock(return_value=success({"id": "shp_1"}))

        result = await adapter.get_shipment("shp_1")

        assert isinstance(result, Success)
        assert result.value.status == ShipmentStatus.QUEUED

    @pytest.mark.asyncio
    async def test_get_rates(self, adapter: EasyPostAdapter, client: MagicMock) -> None:
        """Rates are read from the shipment."""
        client.get_shipment = AsyncMock(
            return_value=success(
                {
                    "id": "shp_1",
                    "rates": [
                        {
                            "id": "rate_1",
                            "carrier": "UPSDAP",
                            "service": "Ground",
                            "rate": "12.40",
                            "delivery_days": None,
                            "est_delivery_days": 3,
                            "delivery_date_guaranteed": True,
                        }
                    ],
                }
            )
        )

        result = await adapter.get_rates("shp_1")

        assert isinstance(result, Success)
        offer = result.value[0]
        assert offer.id == "rate_1"
        assert offer.carrier == "UPSDAP"
        assert offer.service_level == "Ground"
        assert offer.amount == "12.40"
        assert offer.delivery_days == 3
        assert offer.guaranteed is True

    @pytest.mark.asyncio
    async def test_create_customs_item_converts_weight(
        self, adapter: EasyPostAdapter, client: MagicMock
    ) -> None:
        """Customs item weights are sent in ounces."""
        client.create_customs_item = AsyncMock(return_value=success({"id": "cstitem_1"}))

        result = await adapter.create_customs_item(
            CustomsItem(
                description="Ceramic Mug",
                quantity=2,
                net_weight=Decimal("350"),
                mass_unit="g",
                value_amount=Decimal("40"),
                currency="USD",
                origin_country="US",
                tariff_number="6912.00",
            )
        )

        assert isinstance(result, Success)
        assert result.value == "cstitem_1"
        payload = client.create_customs_item.await_args.args[0]
        assert payload["weight"] == "12.35"
        assert payload["value"] == "40.00"
        assert payload["hs_tariff_number"] == "6912.00"
