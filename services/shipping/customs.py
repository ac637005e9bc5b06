"""Customs paperwork for international shipments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.logging import get_logger
from core.result import Failure, Result, success
from services.countries import is_eu_country, is_international
from services.providers.base import (
    CustomsDeclaration,
    CustomsItem,
    ExportCode,
    TaxIdentifier,
    TaxIdType,
)

if TYPE_CHECKING:
    from core.config import ShippingSettings
    from services.providers.base import RateProvider
    from services.providers.errors import ProviderError
    from services.snipcart.types import Order

logger = get_logger(__name__)

CANADA = "CA"


@dataclass(frozen=True, slots=True)
class CustomsAssembly:
    """A declaration registered with the provider."""

    declaration_id: str
    declaration: CustomsDeclaration

    @property
    def shipment_tax_identifiers(self) -> tuple[TaxIdentifier, ...]:
        """Tax ids that must also travel on the shipment (IOSS only)."""
        if self.declaration.exporter_tax_id.id_type == TaxIdType.IOSS:
            return (self.declaration.exporter_tax_id,)
        return ()


def build_customs_items(order: Order, config: ShippingSettings) -> list[CustomsItem]:
    """
    Build one customs item per shippable line item.

    Args:
        order: The order being shipped.
        config: Shipping settings (weight unit and origin country).

    Returns:
        Customs items in line-item order.
    """
    origin = config.manufacture_country or config.sender_address.country
    reference = f"order:{order.invoice_number}" if order.invoice_number else ""
    return [
        CustomsItem(
            description=item.name,
            quantity=item.quantity,
            net_weight=item.weight,
            mass_unit=config.weight_unit,
            value_amount=item.total_price,
            currency=order.currency.upper(),
            origin_country=origin,
            tariff_number=item.hs_code,
            reference=reference,
        )
        for item in order.shippable_items
    ]


def export_code_for(country_code: str) -> ExportCode:
    """Pick the EEL/PFC exemption for a destination."""
    if country_code.upper() == CANADA:
        return ExportCode.NOEEI_30_36
    return ExportCode.NOEEI_30_37_A


def build_customs_declaration(
    order: Order,
    item_ids: list[str],
    config: ShippingSettings,
) -> CustomsDeclaration:
    """
    Build the aggregate declaration for previously created customs items.

    EU destinations declare the IOSS number and mark VAT as collected at
    checkout; everything else declares the exporter EIN.

    Args:
        order: The order being shipped.
        item_ids: Provider ids of the order's customs items.
        config: Shipping settings holding the exporter identifiers.

    Returns:
        The declaration to register with the provider.
    """
    country = order.country
    eu = is_eu_country(country)

    if eu:
        tax_id = TaxIdentifier(
            number=config.ioss,
            id_type=TaxIdType.IOSS,
            issuing_country=config.ioss_issuing_country,
        )
    else:
        tax_id = TaxIdentifier(
            number=config.ein,
            id_type=TaxIdType.EIN,
            issuing_country=config.home_country,
        )

    return CustomsDeclaration(
        item_ids=tuple(item_ids),
        certify_signer=config.customs_signer or config.sender_address.name,
        eel_pfc=export_code_for(country),
        exporter_tax_id=tax_id,
        vat_collected=eu,
    )


class CustomsAssembler:
    """Registers customs items and the declaration with a rate provider."""

    def __init__(self, provider: RateProvider, config: ShippingSettings) -> None:
        self._provider = provider
        self._config = config

    def needs_customs(self, order: Order) -> bool:
        """Check if the order ships outside the home country."""
        return is_international(order.country, self._config.home_country)

    async def assemble(self, order: Order) -> Result[CustomsAssembly | None, ProviderError]:
        """
        Create customs items and the declaration for an order.

        Items are created one by one; the first failure aborts the run.

        Args:
            order: The order being shipped.

        Returns:
            Result containing the registered declaration, None for domestic
            orders, or the first provider error.
        """
        if not self.needs_customs(order):
            return success(None)

        item_ids: list[str] = []
        for item in build_customs_items(order, self._config):
            result = await self._provider.create_customs_item(item)
            if isinstance(result, Failure):
                logger.warning(
                    "Customs item creation failed",
                    invoice=order.invoice_number,
                    item=item.description,
                    error=str(result.error),
                )
                return result
            item_ids.append(result.value)

        declaration = build_customs_declaration(order, item_ids, self._config)
        result = await self._provider.create_customs_declaration(declaration)
        if isinstance(result, Failure):
            logger.warning(
                "Customs declaration creation failed",
                invoice=order.invoice_number,
                error=str(result.error),
            )
            return result

        logger.info(
            "Customs declaration created",
            invoice=order.invoice_number,
            country=order.country,
            declaration_id=result.value,
            items=len(item_ids),
            tax_id_type=declaration.exporter_tax_id.id_type.value,
        )
        return success(CustomsAssembly(declaration_id=result.value, declaration=declaration))
