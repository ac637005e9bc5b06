"""Shipment orchestration for the shipping rate fetch."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from core.logging import get_logger
from core.result import Failure, Result, success
from services.providers.base import Parcel, ShipmentAddress, ShipmentRequest
from services.shipping.address import validate_ship_to_name
from services.shipping.customs import CustomsAssembler
from services.shipping.formatter import RateFilter, RateFormatter
from services.shipping.types import RatesOutcome, ShipmentState, ShippingRate

if TYPE_CHECKING:
    from core.config import SenderAddress, ShippingSettings
    from services.providers.base import RateProvider, Shipment
    from services.providers.errors import ProviderError
    from services.shipping.customs import CustomsAssembly
    from services.snipcart.types import Address, Order

logger = get_logger(__name__)


def sender_to_address(sender: SenderAddress) -> ShipmentAddress:
    """Map the configured ship-from address."""
    return ShipmentAddress(
        name=sender.name,
        company=sender.company,
        street1=sender.address1,
        street2=sender.address2,
        city=sender.city,
        state=sender.state,
        postal_code=sender.postal_code,
        country=sender.country,
        phone=sender.phone,
        email=sender.email,
    )


def recipient_to_address(address: Address, email: str = "") -> ShipmentAddress:
    """Map a Snipcart address to a provider ship-to address."""
    return ShipmentAddress(
        name=address.name,
        company=address.company,
        street1=address.address1,
        street2=address.address2,
        city=address.city,
        state=address.province,
        postal_code=address.postal_code,
        country=address.country,
        phone=address.phone,
        email=email,
    )


def order_weight(order: Order) -> Decimal:
    """Total weight of the order, summed from its items when not given."""
    if order.total_weight > 0:
        return order.total_weight
    return sum((item.weight * item.quantity for item in order.shippable_items), Decimal("0"))


def build_parcel(order: Order, config: ShippingSettings) -> Parcel:
    """Build the parcel from the configured template and the order weight."""
    template = config.default_parcel
    return Parcel(
        length=template.length,
        width=template.width,
        height=template.height,
        distance_unit=config.dimension_unit,
        weight=order_weight(order) or template.weight,
        mass_unit=config.weight_unit,
    )


class _Run:
    """State trail of a single rate fetch."""

    def __init__(self, invoice_number: str) -> None:
        self.invoice_number = invoice_number
        self.states: list[ShipmentState] = [ShipmentState.NEW]

    @property
    def state(self) -> ShipmentState:
        return self.states[-1]

    def advance(self, state: ShipmentState) -> None:
        logger.debug(
            "Shipment state changed",
            invoice=self.invoice_number,
            from_state=self.state.value,
            to_state=state.value,
        )
        self.states.append(state)

    def fail(self, error: ProviderError) -> Failure[ProviderError]:
        logger.warning(
            "Rate fetch failed",
            invoice=self.invoice_number,
            state=self.state.value,
            error=str(error),
        )
        self.states.append(ShipmentState.FAILED)
        return Failure(error)


class ShipmentOrchestrator:
    """
    Drives one shipping rate fetch against a rate provider.

    A fresh order walks NEW, CUSTOMS_PENDING (international only),
    SHIPMENT_REQUESTED, AWAITING_RATES, RATES_READY and DONE. An order that
    already carries a chosen rate reuses its shipment: NEW, SHIPMENT_LOOKUP,
    RATES_READY, DONE. Any provider failure ends the run in FAILED.
    """

    def __init__(
        self,
        provider: RateProvider,
        config: ShippingSettings,
        customs: CustomsAssembler | None = None,
        formatter: RateFormatter | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            provider: Rate provider to talk to.
            config: Shipping settings.
            customs: Customs assembler; built from provider and config if omitted.
            formatter: Rate formatter; built from the allow-list and discount if omitted.
        """
        self._provider = provider
        self._config = config
        self._customs = customs or CustomsAssembler(provider, config)
        self._formatter = formatter or RateFormatter(
            RateFilter(config.allowed_services),
            discount=config.discount,
        )

    def build_request(self, order: Order, customs: CustomsAssembly | None) -> ShipmentRequest:
        """Build the shipment request for an order."""
        return ShipmentRequest(
            address_from=sender_to_address(self._config.sender_address),
            address_to=recipient_to_address(order.ship_to, order.email),
            parcel=build_parcel(order, self._config),
            customs_declaration_id=customs.declaration_id if customs else None,
            tax_identifiers=customs.shipment_tax_identifiers if customs else (),
        )

    async def fetch_rates(self, order: Order) -> Result[RatesOutcome, ProviderError]:
        """
        Fetch formatted shipping rates for an order.

        Args:
            order: The order snapshot from the webhook.

        Returns:
            Result containing the outcome (rates or address errors), or the
            provider error that aborted the run.
        """
        run = _Run(order.invoice_number)

        if self._config.validate_address_fields:
            errors = validate_ship_to_name(order.ship_to)
            if errors:
                logger.info(
                    "Ship-to address rejected",
                    invoice=order.invoice_number,
                    keys=[e.key for e in errors],
                )
                return success(RatesOutcome(errors=tuple(errors), states=tuple(run.states)))

        if not order.shippable_items:
            logger.info("Order has no shippable items", invoice=order.invoice_number)
            run.advance(ShipmentState.DONE)
            return success(RatesOutcome(states=tuple(run.states)))

        if order.shipping_rate_user_defined_id:
            shipment_result = await self._lookup_shipment(run, order)
        else:
            shipment_result = await self._create_shipment(run, order)

        if isinstance(shipment_result, Failure):
            return run.fail(shipment_result.error)
        shipment = shipment_result.value

        run.advance(ShipmentState.RATES_READY)
        offers = await self._provider.get_rates(shipment.id)
        if isinstance(offers, Failure):
            return run.fail(offers.error)

        formatted = self._formatter.format(
            shipment.id,
            offers.value,
            provider_code=self._provider.provider_code,
        )
        if isinstance(formatted, Failure):
            return run.fail(formatted.error)

        run.advance(ShipmentState.DONE)
        rates: list[ShippingRate] = formatted.value
        logger.info(
            "Shipping rates fetched",
            invoice=order.invoice_number,
            provider=self._provider.provider_code,
            shipment_id=shipment.id,
            country=order.country,
            rates=len(rates),
        )
        return success(
            RatesOutcome(rates=tuple(rates), shipment_id=shipment.id, states=tuple(run.states))
        )

    async def _lookup_shipment(self, run: _Run, order: Order) -> Result[Shipment, ProviderError]:
        shipment_id = ShippingRate.shipment_id_from(order.shipping_rate_user_defined_id)
        run.advance(ShipmentState.SHIPMENT_LOOKUP)
        return await self._provider.get_shipment(shipment_id)

    async def _create_shipment(self, run: _Run, order: Order) -> Result[Shipment, ProviderError]:
        customs: CustomsAssembly | None = None
        if self._customs.needs_customs(order):
            run.advance(ShipmentState.CUSTOMS_PENDING)
            assembled = await self._customs.assemble(order)
            if isinstance(assembled, Failure):
                return assembled
            customs = assembled.value

        run.advance(ShipmentState.SHIPMENT_REQUESTED)
        created = await self._provider.create_shipment(self.build_request(order, customs))
        if isinstance(created, Failure):
            return created

        run.advance(ShipmentState.AWAITING_RATES)
        return await self._provider.await_ready(created.value.id, self._config.rates_timeout)
