"""EasyPost rate provider adapter."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

from core.logging import get_logger
from core.result import Failure, Result, failure, success
from services.countries import grams_to_ounces
from services.providers.base import RateOffer, Shipment, ShipmentStatus
from services.providers.easypost.client import PROVIDER_CODE, EasyPostClient
from services.providers.errors import ParseError, ProviderError
from services.providers.polling import poll_until_ready

if TYPE_CHECKING:
    from services.providers.base import (
        CustomsDeclaration,
        CustomsItem,
        Parcel,
        ShipmentAddress,
        ShipmentRequest,
    )

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 1.0

CENTIMETERS_PER_INCH = Decimal("2.54")
TWO_PLACES = Decimal("0.01")


def to_ounces(weight: Decimal, unit: str) -> Decimal:
    """Convert a weight to ounces, the only mass unit EasyPost accepts."""
    unit = unit.lower()
    if unit == "g":
        return grams_to_ounces(weight)
    if unit == "kg":
        return grams_to_ounces(weight * 1000)
    if unit == "lb":
        return (weight * 16).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return weight


def to_inches(length: Decimal, unit: str) -> Decimal:
    """Convert a length to inches, the only distance unit EasyPost accepts."""
    unit = unit.lower()
    if unit == "cm":
        return (length / CENTIMETERS_PER_INCH).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    if unit == "mm":
        return (length / CENTIMETERS_PER_INCH / 10).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return length


class EasyPostAdapter:
    """
    Adapter for EasyPost.

    Implements the RateProvider protocol on top of EasyPostClient. EasyPost
    attaches exporter tax ids to the shipment rather than the customs info,
    so those are sent from ShipmentRequest.tax_identifiers.
    """

    def __init__(
        self,
        client: EasyPostClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """
        Initialize EasyPost adapter.

        Args:
            client: Configured EasyPost client.
            poll_interval: Seconds between status polls in await_ready.
        """
        self._client = client
        self._poll_interval = poll_interval

    @property
    def provider_code(self) -> str:
        """Return the provider code."""
        return PROVIDER_CODE

    async def create_shipment(self, request: ShipmentRequest) -> Result[Shipment, ProviderError]:
        """Create an EasyPost shipment."""
        shipment: dict[str, Any] = {
            "from_address": self._address(request.address_from),
            "to_address": self._address(request.address_to),
            "parcel": self._parcel(request.parcel),
        }
        if request.customs_declaration_id:
            shipment["customs_info"] = {"id": request.customs_declaration_id}
        if request.tax_identifiers:
            shipment["tax_identifiers"] = [
                {
                    "entity": tax_id.entity,
                    "tax_id": tax_id.number,
                    "tax_id_type": tax_id.id_type.value,
                    "issuing_country": tax_id.issuing_country,
                }
                for tax_id in request.tax_identifiers
            ]

        result = await self._client.create_shipment(shipment)
        if isinstance(result, Failure):
            return failure(result.error)
        return self._parse_shipment(result.value)

    async def get_shipment(self, shipment_id: str) -> Result[Shipment, ProviderError]:
        """Fetch an EasyPost shipment."""
        result = await self._client.get_shipment(shipment_id)
        if isinstance(result, Failure):
            return failure(result.error)
        return self._parse_shipment(result.value)

    async def create_customs_item(self, item: CustomsItem) -> Result[str, ProviderError]:
        """Create an EasyPost customs item."""
        customs_item: dict[str, Any] = {
            "description": item.description,
            "quantity": item.quantity,
            "weight": str(to_ounces(item.net_weight, item.mass_unit)),
            "value": f"{item.value_amount:.2f}",
            "currency": item.currency,
            "origin_country": item.origin_country,
            "code": item.reference,
        }
        if item.tariff_number:
            customs_item["hs_tariff_number"] = item.tariff_number

        result = await self._client.create_customs_item(customs_item)
        if isinstance(result, Failure):
            return failure(result.error)
        return self._object_id(result.value)

    async def create_customs_declaration(
        self,
        declaration: CustomsDeclaration,
    ) -> Result[str, ProviderError]:
        """Create an EasyPost customs info."""
        customs_info: dict[str, Any] = {
            "customs_certify": declaration.certify,
            "customs_signer": declaration.certify_signer,
            "contents_type": declaration.contents_type.value,
            "restriction_type": declaration.restriction_type.value,
            "eel_pfc": declaration.eel_pfc.value,
            "non_delivery_option": declaration.non_delivery_option.value,
            "customs_items": [{"id": item_id} for item_id in declaration.item_ids],
        }

        result = await self._client.create_customs_info(customs_info)
        if isinstance(result, Failure):
            return failure(result.error)
        return self._object_id(result.value)

    async def await_ready(self, shipment_id: str, timeout: float) -> Result[Shipment, ProviderError]:
        """Poll until EasyPost returns the shipment with its rates."""
        return await poll_until_ready(
            self.get_shipment,
            shipment_id,
            provider_code=PROVIDER_CODE,
            timeout=timeout,
            poll_interval=self._poll_interval,
        )

    async def get_rates(self, shipment_id: str) -> Result[list[RateOffer], ProviderError]:
        """Fetch the rates of an EasyPost shipment."""
        result = await self._client.get_shipment(shipment_id)
        if isinstance(result, Failure):
            return failure(result.error)

        try:
            return success([self._parse_rate(r) for r in result.value.get("rates") or []])
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error("Failed to parse EasyPost rates", shipment_id=shipment_id, error=str(e))
            return failure(
                ParseError(provider_code=PROVIDER_CODE, message="Failed to parse rates", details=str(e))
            )

    async def close(self) -> None:
        """Close the underlying client."""
        await self._client.close()

    @staticmethod
    def _address(address: ShipmentAddress) -> dict[str, str]:
        """Convert an address to EasyPost format."""
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
        """Convert a parcel to EasyPost format (inches and ounces)."""
        return {
            "length": str(to_inches(parcel.length, parcel.distance_unit)),
            "width": str(to_inches(parcel.width, parcel.distance_unit)),
            "height": str(to_inches(parcel.height, parcel.distance_unit)),
            "weight": str(to_ounces(parcel.weight, parcel.mass_unit)),
        }

    @staticmethod
    def _object_id(data: dict[str, Any]) -> Result[str, ProviderError]:
        """Extract the id of a created EasyPost object."""
        object_id = data.get("id")
        if not object_id:
            return failure(ParseError(provider_code=PROVIDER_CODE, message="Response has no id"))
        return success(str(object_id))

    @staticmethod
    def _parse_shipment(data: dict[str, Any]) -> Result[Shipment, ProviderError]:
        """Parse an EasyPost shipment object."""
        shipment_id = data.get("id")
        if not shipment_id:
            return failure(ParseError(provider_code=PROVIDER_CODE, message="Shipment has no id"))

        messages = tuple(
            f"{m.get('carrier', '')}: {m.get('message', '')}" if isinstance(m, dict) else str(m)
            for m in data.get("messages") or []
        )
        if messages:
            logger.warning("EasyPost shipment messages", shipment_id=shipment_id, messages=messages)

        # Rates are attached once EasyPost finished rating the shipment
        status = ShipmentStatus.SUCCESS if isinstance(data.get("rates"), list) else ShipmentStatus.QUEUED
        return success(Shipment(id=str(shipment_id), status=status, messages=messages))

    @staticmethod
    def _parse_rate(data: dict[str, Any]) -> RateOffer:
        """Parse an EasyPost rate object."""
        days = data.get("delivery_days")
        if days is None:
            days = data.get("est_delivery_days")
        return RateOffer(
            id=str(data["id"]),
            carrier=str(data.get("carrier", "")),
            service_level=str(data.get("service", "")),
            amount=str(data.get("rate", "")),
            currency=str(data.get("currency", "USD")),
            delivery_days=int(days) if days is not None else None,
            guaranteed=bool(data.get("delivery_date_guaranteed", False)),
        )
