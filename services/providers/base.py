"""Base types and protocol for shipping rate providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from decimal import Decimal

    from core.result import Result
    from services.providers.errors import ProviderError


class NonDeliveryOption(str, Enum):
    """What the carrier does with an undeliverable international parcel."""

    RETURN = "return"
    ABANDON = "abandon"


class ContentsType(str, Enum):
    """Customs contents classification."""

    DOCUMENTS = "documents"
    GIFT = "gift"
    MERCHANDISE = "merchandise"
    RETURNED_GOODS = "returned_goods"
    SAMPLE = "sample"
    DANGEROUS_GOODS = "dangerous_goods"
    HUMANITARIAN_DONATION = "humanitarian_donation"
    OTHER = "other"


class RestrictionType(str, Enum):
    """Customs restriction classification."""

    NONE = "none"
    OTHER = "other"
    QUARANTINE = "quarantine"
    SANITARY_PHYTOSANITARY_INSPECTION = "sanitary_phytosanitary_inspection"


class ExportCode(str, Enum):
    """EEL/PFC export exemption codes."""

    NOEEI_30_37_A = "NOEEI 30.37(a)"  # value under $2500
    NOEEI_30_37_H = "NOEEI 30.37(h)"
    NOEEI_30_36 = "NOEEI 30.36"  # Canada


class TaxIdType(str, Enum):
    """Exporter tax identifier types."""

    EIN = "EIN"
    IOSS = "IOSS"


class ShipmentStatus(str, Enum):
    """Provider-side processing status of a shipment."""

    QUEUED = "QUEUED"
    WAITING = "WAITING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"

    @property
    def is_pending(self) -> bool:
        """Check if rates are still being computed."""
        return self in {ShipmentStatus.QUEUED, ShipmentStatus.WAITING}


@dataclass(frozen=True, slots=True)
class ShipmentAddress:
    """A ship-from or ship-to address."""

    name: str
    street1: str
    city: str
    country: str
    company: str = ""
    street2: str = ""
    state: str = ""
    postal_code: str = ""
    phone: str = ""
    email: str = ""


@dataclass(frozen=True, slots=True)
class Parcel:
    """
    Parcel dimensions and weight.

    Attributes:
        length: Length in ``distance_unit``.
        width: Width in ``distance_unit``.
        height: Height in ``distance_unit``.
        distance_unit: Dimension unit, e.g. "cm" or "in".
        weight: Weight in ``mass_unit``.
        mass_unit: Weight unit, e.g. "g" or "oz".
    """

    length: Decimal
    width: Decimal
    height: Decimal
    distance_unit: str
    weight: Decimal
    mass_unit: str


@dataclass(frozen=True, slots=True)
class CustomsItem:
    """
    Customs declaration for one line item.

    Attributes:
        description: Contents description (the product name).
        quantity: Number of units.
        net_weight: Weight of one unit in ``mass_unit``.
        mass_unit: Weight unit.
        value_amount: Total declared value of the line.
        currency: ISO currency code of the value.
        origin_country: Country of manufacture.
        tariff_number: Harmonized-system code, if known.
        reference: External order reference.
    """

    description: str
    quantity: int
    net_weight: Decimal
    mass_unit: str
    value_amount: Decimal
    currency: str
    origin_country: str
    tariff_number: str | None = None
    reference: str = ""


@dataclass(frozen=True, slots=True)
class TaxIdentifier:
    """Exporter tax identifier attached to a customs declaration."""

    number: str
    id_type: TaxIdType
    issuing_country: str = ""
    entity: str = "SENDER"


@dataclass(frozen=True, slots=True)
class CustomsDeclaration:
    """
    Aggregate customs declaration for an international shipment.

    Attributes:
        item_ids: Provider ids of the previously created customs items.
        certify: Whether the signer certifies the declaration.
        certify_signer: Name of the certifying person.
        non_delivery_option: Handling of undeliverable parcels.
        contents_type: Contents classification.
        restriction_type: Restriction classification.
        incoterm: Incoterm, DDU unless duties are prepaid.
        eel_pfc: Export exemption code.
        exporter_tax_id: EIN by default, IOSS for EU destinations.
        vat_collected: True when EU VAT was collected at checkout.
    """

    item_ids: tuple[str, ...]
    certify_signer: str
    eel_pfc: ExportCode
    exporter_tax_id: TaxIdentifier
    certify: bool = True
    non_delivery_option: NonDeliveryOption = NonDeliveryOption.RETURN
    contents_type: ContentsType = ContentsType.MERCHANDISE
    restriction_type: RestrictionType = RestrictionType.NONE
    incoterm: str = "DDU"
    vat_collected: bool = False


@dataclass(frozen=True, slots=True)
class ShipmentRequest:
    """
    Everything a provider needs to create a shipment.

    ``tax_identifiers`` repeats the exporter tax id for providers that
    attach it to the shipment instead of the customs declaration.
    """

    address_from: ShipmentAddress
    address_to: ShipmentAddress
    parcel: Parcel
    customs_declaration_id: str | None = None
    tax_identifiers: tuple[TaxIdentifier, ...] = ()


@dataclass(frozen=True, slots=True)
class Shipment:
    """Provider-side shipment."""

    id: str
    status: ShipmentStatus
    messages: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class RateOffer:
    """
    A raw carrier rate as returned by a provider.

    Attributes:
        id: Provider rate id.
        carrier: Carrier code, e.g. "USPS" or "UPSDAP".
        service_level: Machine service code, e.g. "usps_priority" or "Ground".
        amount: Price as sent by the provider (a decimal string).
        service_name: Provider display name of the service, when it has one.
        currency: ISO currency code of the amount.
        delivery_days: Estimated transit days, if known.
        guaranteed: Whether the carrier guarantees the delivery date.
    """

    id: str
    carrier: str
    service_level: str
    amount: str
    service_name: str = ""
    currency: str = "USD"
    delivery_days: int | None = None
    guaranteed: bool = False


@runtime_checkable
class RateProvider(Protocol):
    """
    Protocol defining the interface for shipping rate providers.

    All provider implementations must conform to this protocol.
    """

    @property
    def provider_code(self) -> str:
        """Return the unique code for this provider."""
        ...

    async def create_shipment(
        self,
        request: ShipmentRequest,
    ) -> Result[Shipment, ProviderError]:
        """Create a shipment; rate computation may continue asynchronously."""
        ...

    async def get_shipment(self, shipment_id: str) -> Result[Shipment, ProviderError]:
        """Fetch an existing shipment."""
        ...

    async def create_customs_item(self, item: CustomsItem) -> Result[str, ProviderError]:
        """Create a customs item and return its provider id."""
        ...

    async def create_customs_declaration(
        self,
        declaration: CustomsDeclaration,
    ) -> Result[str, ProviderError]:
        """Create a customs declaration and return its provider id."""
        ...

    async def await_ready(
        self,
        shipment_id: str,
        timeout: float,
    ) -> Result[Shipment, ProviderError]:
        """
        Block until the provider finished computing rates for a shipment.

        Args:
            shipment_id: Provider shipment id.
            timeout: Maximum number of seconds to wait.

        Returns:
            Result containing the ready Shipment, or a timeout/processing error.
        """
        ...

    async def get_rates(self, shipment_id: str) -> Result[list[RateOffer], ProviderError]:
        """Fetch the computed rates of a shipment."""
        ...

    async def close(self) -> None:
        """Close the provider and release resources."""
        ...
