"""Shippo rate provider adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from core.logging import get_logger
from core.result import Failure, Result, failure, success
from services.providers.base import (
    RateOffer,
    Shipment,
    ShipmentStatus,
)
from services.providers.errors import ParseError, ProviderError
from services.providers.polling import poll_until_ready
from services.providers.shippo.client import PROVIDER_CODE, ShippoClient

if TYPE_CHECKING:
    from decimal import Decimal

    from services.providers.base import (
        CustomsDeclaration,
        CustomsItem,
        Parcel,
        ShipmentAddress,
        ShipmentRequest,
    )

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 1.0


def _amount(value: Decimal) -> str:
    return f"{value:.2f}"


class ShippoAdapter:
    """
    Adapter for Shippo.

    Implements the RateProvider protocol on top of ShippoClient. Shipments
    are created with ``async: true`` and polled until their status leaves
    QUEUED/WAITING.
    """

    def __init__(
        self,
        client: ShippoClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """
        Initialize Shippo adapter.

        Args:
            client: Configured Shippo client.
            poll_interval: Seconds between status polls in await_ready.
        """
        self._client = client
        self._poll_interval = poll_interval

    @property
    def provider_code(self) -> str:
        """Return the provider code."""
        return PROVIDER_CODE

    async def create_shipment(self, request: ShipmentRequest) -> Result[Shipment, ProviderError]:
        """Create a Shippo shipment."""
        payload: dict[str, Any] = {
            "address_from": self._address(request.address_from),
            "address_to": self._address(request.address_to),
            "parcels": [self._parcel(request.parcel)],
            "async": True,
        }
        if request.customs_declaration_id:
            payload["customs_declaration"] = request.customs_declaration_id

        result = await self._client.create_shipment(payload)
        if isinstance(result, Failure):
            return failure(result.error)
        return self._parse_shipment(result.value)

    async def get_shipment(self, shipment_id: str) -> Result[Shipment, ProviderError]:
        """Fetch a Shippo shipment."""
        result = await self._client.get_shipment(shipment_id)
        if isinstance(result, Failure):
            return failure(result.error)
        return self._parse_shipment(result.value)

    async def create_customs_item(self, item: CustomsItem) -> Result[str, ProviderError]:
        """Create a Shippo customs item."""
        payload: dict[str, Any] = {
            "description": item.description,
            "quantity": item.quantity,
            "net_weight": _amount(item.net_weight),
            "mass_unit": item.mass_unit,
            "value_amount": _amount(item.value_amount),
            "value_currency": item.currency,
            "origin_country": item.origin_country,
            "metadata": item.reference,
        }
        if item.tariff_number:
            payload["tariff_number"] = item.tariff_number

        result = await self._client.create_customs_item(payload)
        if isinstance(result, Failure):
            return failure(result.error)
        return self._object_id(result.value)

    async def create_customs_declaration(
        self,
        declaration: CustomsDeclaration,
    ) -> Result[str, ProviderError]:
        """Create a Shippo customs declaration."""
        payload: dict[str, Any] = {
            "certify": declaration.certify,
            "certify_signer": declaration.certify_signer,
            "items": list(declaration.item_ids),
            "non_delivery_option": declaration.non_delivery_option.value,
            "contents_type": declaration.contents_type.value,
            "restriction_type": declaration.restriction_type.value,
            "incoterm": declaration.incoterm,
            "eel_pfc": declaration.eel_pfc.value,
            "is_vat_collected": declaration.vat_collected,
            "exporter_identification": {
                "tax_id": {
                    "number": declaration.exporter_tax_id.number,
                    "type": declaration.exporter_tax_id.id_type.value,
                },
            },
        }

        result = await self._client.create_customs_declaration(payload)
        if isinstance(result, Failure):
            return failure(result.error)
        return self._object_id(result.value)

    async def await_ready(self, shipment_id: str, timeout: float) -> Result[Shipment, ProviderError]:
        """Poll until Shippo finished rating the shipment."""
        return await poll_until_ready(
            self.get_shipment,
            shipment_id,
            provider_code=PROVIDER_CODE,
            timeout=timeout,
            poll_interval=self._poll_interval,
        )

    async def get_rates(self, shipment_id: str) -> Result[list[RateOffer], ProviderError]:
        """Fetch the rates of a Shippo shipment."""
        result = await self._client.get_rates(shipment_id)
        if isinstance(result, Failure):
            return failure(result.error)

        try:
            return success([self._parse_rate(r) for r in result.value.get("results", [])])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error("Failed to parse Shippo rates", shipment_id=shipment_id, error=str(e))
            return failure(
                ParseError(provider_code=PROVIDER_CODE, message="Failed to parse rates", details=str(e))
            )

    async def close(self) -> None:
        """Close the underlying client."""
        await self._client.close()

    @staticmethod
    def _address(address: ShipmentAddress) -> dict[str, str]:
        """Convert an address to Shippo format."""
        return {
            "name": address.name,
            "company": address.company,
            "street1": address.street1,
            "street2": address.street2,
            "city": address.city,
            "state": address.state,
            "zip": address.postal_code,
            "country": address.country,
            "phone": address.phone,
            "email": address.email,
        }

    @staticmethod
    def _parcel(parcel: Parcel) -> dict[str, str]:
        """Convert a parcel to Shippo format."""
        return {
            "length": _amount(parcel.length),
            "width": _amount(parcel.width),
            "height": _amount(parcel.height),
            "distance_unit": parcel.distance_unit,
            "weight": _amount(parcel.weight),
            "mass_unit": parcel.mass_unit,
        }

    @staticmethod
    def _object_id(data: dict[str, Any]) -> Result[str, ProviderError]:
        """Extract the object id of a created Shippo object."""
        object_id = data.get("object_id")
        if not object_id:
            return failure(
                ParseError(provider_code=PROVIDER_CODE, message="Response has no object_id")
            )
        return success(str(object_id))

    @staticmethod
    def _parse_shipment(data: dict[str, Any]) -> Result[Shipment, ProviderError]:
        """Parse a Shippo shipment object."""
        shipment_id = data.get("object_id")
        if not shipment_id:
            return failure(
                ParseError(provider_code=PROVIDER_CODE, message="Shipment has no object_id")
            )

        try:
            status = ShipmentStatus(str(data.get("status", "QUEUED")).upper())
        except ValueError:
            status = ShipmentStatus.QUEUED

        messages = tuple(
            str(m.get("text", "")) if isinstance(m, dict) else str(m)
            for m in data.get("messages") or []
        )
        if messages:
            logger.warning("Shippo shipment messages", shipment_id=shipment_id, messages=messages)
        return success(Shipment(id=str(shipment_id), status=status, messages=messages))

    @staticmethod
    def _parse_rate(data: dict[str, Any]) -> RateOffer:
        """Parse a Shippo rate object."""
        servicelevel = data.get("servicelevel") or {}
        estimated_days = data.get("estimated_days")
        return RateOffer(
            id=str(data["object_id"]),
            carrier=str(data.get("provider", "")),
            service_level=str(servicelevel.get("token", "")),
            service_name=str(servicelevel.get("name", "")),
            amount=str(data.get("amount", "")),
            currency=str(data.get("currency", "USD")),
            delivery_days=int(estimated_days) if estimated_days is not None else None,
        )
