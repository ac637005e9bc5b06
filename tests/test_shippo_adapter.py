"""Tests for the Shippo adapter."""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.result import Failure, Success, failure, success
from services.providers.base import (
    CustomsDeclaration,
    CustomsItem,
    ExportCode,
    Parcel,
    RateProvider,
    ShipmentAddress,
    ShipmentRequest,
    ShipmentStatus,
    TaxIdentifier,
    TaxIdType,
)
from services.providers.errors import ErrorCode, NotFoundError
from services.providers.shippo import ShippoAdapter


def shippo_rate(**overrides: Any) -> dict[str, Any]:
    """Build a Shippo rate object."""
    rate: dict[str, Any] = {
        "object_id": "rate-1",
        "provider": "USPS",
        "servicelevel": {"token": "usps_priority", "name": "Priority Mail"},
        "amount": "8.15",
        "currency": "USD",
        "estimated_days": 2,
    }
    rate.update(overrides)
    return rate


@pytest.fixture()
def client() -> MagicMock:
    """Return a mocked Shippo client."""
    client = MagicMock()
    client.close = AsyncMock()
    return client


@pytest.fixture()
def adapter(client: MagicMock) -> ShippoAdapter:
    """Return an adapter over the mocked client."""
    return ShippoAdapter(client, poll_interval=0.01)


@pytest.fixture()
def request_() -> ShipmentRequest:
    """Return a shipment request."""
    return ShipmentRequest(
        address_from=ShipmentAddress(name="Jane", street1="10 Rd", city="Concord", country="US"),
        address_to=ShipmentAddress(
            name="Jon Doe", street1="1 Str", city="Berlin", country="DE", postal_code="10115"
        ),
        parcel=Parcel(
            length=Decimal("30"),
            width=Decimal("20"),
            height=Decimal("10"),
            distance_unit="cm",
            weight=Decimal("700"),
            mass_unit="g",
        ),
        customs_declaration_id="cd-1",
    )


class TestShippoAdapter:
    """Tests for ShippoAdapter."""

    def test_conforms_to_protocol(self, adapter: ShippoAdapter) -> None:
        """The adapter is a RateProvider."""
        assert isinstance(adapter, RateProvider)
        assert adapter.provider_code == "shippo"

    @pytest.mark.asyncio
    async def test_create_shipment_payload(
        self, adapter: ShippoAdapter, client: MagicMock, request_: ShipmentRequest
    ) -> None:
        """Shipments are created asynchronously with the customs declaration."""
        client.create_shipment = AsyncMock(
            return_value=success({"object_id": "shp-1", "status": "QUEUED"})
        )

        result = await adapter.create_shipment(request_)

        assert isinstance(result, Success)
        assert result.value.id == "shp-1"
        assert result.value.status == ShipmentStatus.QUEUED
        payload = client.create_shipment.await_args.args[0]
        assert payload["async"] is True
        assert payload["customs_declaration"] == "cd-1"
        assert payload["address_to"]["zip"] == "10115"
        assert payload["parcels"][0]["weight"] == "700.00"
        assert payload["parcels"][0]["mass_unit"] == "g"

    @pytest.mark.asyncio
    async def test_get_shipment_error_passthrough(
        self, adapter: ShippoAdapter, client: MagicMock
    ) -> None:
        """Client errors are returned unchanged."""
        client.get_shipment = AsyncMock(return_value=failure(NotFoundError("shippo")))

        result = await adapter.get_shipment("missing")

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_status_treated_as_queued(
        self, adapter: ShippoAdapter, client: MagicMock
    ) -> None:
        """Unrecognized statuses keep polling."""
        client.get_shipment = AsyncMock(
            return_value=success({"object_id": "shp-1", "status": "PROCESSING"})
        )

        result = await adapter.get_shipment("shp-1")

        assert isinstance(result, Success)
        assert result.value.status == ShipmentStatus.QUEUED

    @pytest.mark.asyncio
    async def test_create_customs_item(self, adapter: ShippoAdapter, client: MagicMock) -> None:
        """Customs items send weight, value and tariff number."""
        client.create_customs_item = AsyncMock(return_value=success({"object_id": "ci-1"}))
        item = CustomsItem(
            description="Ceramic Mug",
            quantity=2,
            net_weight=Decimal("350"),
            mass_unit="g",
            value_amount=Decimal("40"),
            currency="USD",
            origin_country="US",
            tariff_number="6912.00",
        )

        result = await adapter.create_customs_item(item)

        assert isinstance(result, Success)
        assert result.value == "ci-1"
        payload = client.create_customs_item.await_args.args[0]
        assert payload["value_amount"] == "40.00"
        assert payload["tariff_number"] == "6912.00"

    @pytest.mark.asyncio
    async def test_create_customs_declaration(
        self, adapter: ShippoAdapter, client: MagicMock
    ) -> None:
        """Declarations carry the exporter tax id and VAT flag."""
        client.create_customs_declaration = AsyncMock(return_value=success({"object_id": "cd-1"}))
        declaration = CustomsDeclaration(
            item_ids=("ci-1",),
            certify_signer="Jane",
            eel_pfc=ExportCode.NOEEI_30_37_A,
            exporter_tax_id=TaxIdentifier(number="IM1", id_type=TaxIdType.IOSS),
            vat_collected=True,
        )

        result = await adapter.create_customs_declaration(declaration)

        assert isinstance(result, Success)
        payload = client.create_customs_declaration.await_args.args[0]
        assert payload["items"] == ["ci-1"]
        assert payload["eel_pfc"] == "NOEEI 30.37(a)"
        assert payload["non_delivery_option"] == "return"
        assert payload["is_vat_collected"] is True
        assert payload["exporter_identification"]["tax_id"] == {"number": "IM1", "type": "IOSS"}

    @pytest.mark.asyncio
    async def test_missing_object_id_is_parse_error(
        self, adapter: ShippoAdapter, client: MagicMock
    ) -> None:
        """Created objects must carry an id."""
        client.create_customs_declaration = AsyncMock(return_value=success({}))
        declaration = CustomsDeclaration(
            item_ids=(),
            certify_signer="Jane",
            eel_pfc=ExportCode.NOEEI_30_36,
            exporter_tax_id=TaxIdentifier(number="12-3", id_type=TaxIdType.EIN),
        )

        result = await adapter.create_customs_declaration(declaration)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.PARSE

    @pytest.mark.asyncio
    async def test_await_ready_polls_until_success(
        self, adapter: ShippoAdapter, client: MagicMock
    ) -> None:
        """await_ready polls until the status leaves QUEUED."""
        client.get_shipment = AsyncMock(
            side_effect=[
                success({"object_id": "shp-1", "status": "QUEUED"}),
                success({"object_id": "shp-1", "status": "WAITING"}),
                success({"object_id": "shp-1", "status": "SUCCESS"}),
            ]
        )

        result = await adapter.await_ready("shp-1", timeout=5.0)

        assert isinstance(result, Success)
        assert result.value.status == ShipmentStatus.SUCCESS
        assert client.get_shipment.await_count == 3

    @pytest.mark.asyncio
    async def test_get_rates(self, adapter: ShippoAdapter, client: MagicMock) -> None:
        """Rates are parsed from the results list."""
        client.get_rates = AsyncMock(
            return_value=success(
                {"results": [shippo_rate(), shippo_rate(object_id="rate-2", estimated_days=None)]}
            )
        )

        result = await adapter.get_rates("shp-1")

        assert isinstance(result, Success)
        first, second = result.value
        assert first.id == "rate-1"
        assert first.carrier == "USPS"
        assert first.service_level == "usps_priority"
        assert first.service_name == "Priority Mail"
        assert first.amount == "8.15"
        assert first.delivery_days == 2
        assert second.delivery_days is None

    @pytest.mark.asyncio
    async def test_get_rates_malformed(self, adapter: ShippoAdapter, client: MagicMock) -> None:
        """A rate without an id is a parse error."""
        bad = shippo_rate()
        del bad["object_id"]
        client.get_rates = AsyncMock(return_value=success({"results": [bad]}))

        result = await adapter.get_rates("shp-1")

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.PARSE

    @pytest.mark.asyncio
    async def test_close(self, adapter: ShippoAdapter, client: MagicMock) -> None:
        """close closes the client."""
        await adapter.close()

        client.close.assert_awaited_once()
