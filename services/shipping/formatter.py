"""
Rate filtering, discounting and presentation.

Provider offers carry machine carrier and service codes ("UPSDAP",
"usps_priority_express"). Snipcart shows the description to the customer,
so offers are filtered against the allow-list, discounted, given a readable
description and sorted by price.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from core.logging import get_logger
from core.result import Result, failure, success
from services.providers.errors import ParseError
from services.shipping.types import ShippingRate

if TYPE_CHECKING:
    from collections.abc import Iterable

    from services.providers.base import RateOffer
    from services.providers.errors import ProviderError

logger = get_logger(__name__)

CENTS = Decimal("0.01")

# Provider carrier codes, keyed case-insensitively without separators
CARRIER_ALIASES: dict[str, str] = {
    "UPS": "UPS",
    "UPSDAP": "UPS",
    "FEDEX": "FedEx",
    "FEDEXDEFAULT": "FedEx",
    "USPS": "USPS",
    "USPSRETURNS": "USPS",
    "DHL": "DHL",
    "DHLEXPRESS": "DHL Express",
    "DHLECOMMERCE": "DHL eCommerce",
    "CANADAPOST": "Canada Post",
}

_SEPARATORS = re.compile(r"[\s_\-]+")
_CAMEL_LOWER_UPPER = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_CAMEL_ACRONYM = re.compile(r"(?<=[A-Z])(?=[A-Z][a-z])")


def _carrier_key(carrier: str) -> str:
    return _SEPARATORS.sub("", carrier).upper()


def carrier_display_name(carrier: str) -> str:
    """Return the customer-facing name of a carrier code."""
    return CARRIER_ALIASES.get(_carrier_key(carrier), carrier)


def _strip_carrier_prefix(service: str, carrier: str, display: str) -> str:
    candidates = {carrier, display, _SEPARATORS.sub("", display), _SEPARATORS.sub("_", display)}
    lowered = service.lower()
    for candidate in sorted(candidates, key=len, reverse=True):
        if candidate and lowered.startswith(candidate.lower()):
            return service[len(candidate) :].lstrip(" _-")
    return service


def _humanize(service: str) -> str:
    spaced = _CAMEL_ACRONYM.sub(" ", _CAMEL_LOWER_UPPER.sub(" ", service))
    words = _SEPARATORS.split(spaced.strip())
    return " ".join(w.capitalize() if w.isupper() or w.islower() else w for w in words if w)


def describe(
    carrier: str,
    service: str,
    delivery_days: int | None = None,
    guaranteed: bool = False,
) -> str:
    """
    Build the customer-facing description of a rate.

    >>> describe("UPSDAP", "UPSGround", 3)
    'UPS Ground - Estimated arrival 3 days'
    >>> describe("USPS", "usps_priority_express")
    'USPS Priority Express'

    Args:
        carrier: Provider carrier code.
        service: Provider service code or name.
        delivery_days: Transit days; no arrival suffix unless positive.
        guaranteed: Whether the carrier guarantees the arrival date.

    Returns:
        Description string.
    """
    display = carrier_display_name(carrier)
    service_phrase = _humanize(_strip_carrier_prefix(service, carrier, display))
    description = f"{display} {service_phrase}".strip()

    if delivery_days is not None and delivery_days > 0:
        kind = "Guaranteed" if guaranteed else "Estimated"
        description = f"{description} - {kind} arrival {delivery_days} days"

    return description


def _parse_amount(raw: str) -> Decimal | None:
    try:
        amount = Decimal(raw)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return amount if amount.is_finite() else None


def discounted_cost(amount: Decimal, discount: Decimal) -> Decimal:
    """Subtract the flat discount, flooring at zero, rounded to cents."""
    return max(amount - discount, Decimal("0")).quantize(CENTS, rounding=ROUND_HALF_UP)


class RateFilter:
    """
    Allow-list of carriers and services.

    Entries are either a carrier ("USPS") or "carrier:service_level"
    ("UPSDAP:Ground"), compared case-insensitively. A carrier matches by
    its provider code or display name. An empty list allows everything.
    """

    def __init__(self, allowed: Iterable[str] = ()) -> None:
        self._carriers: set[str] = set()
        self._services: set[tuple[str, str]] = set()
        for entry in allowed:
            carrier, _, service = entry.strip().partition(":")
            if not carrier:
                continue
            if service:
                self._services.add((_carrier_key(carrier), service.strip().lower()))
            else:
                self._carriers.add(_carrier_key(carrier))

    @property
    def allows_all(self) -> bool:
        """Check if no restriction is configured."""
        return not self._carriers and not self._services

    def allowed(self, offer: RateOffer) -> bool:
        """Check if an offer passes the allow-list."""
        if self.allows_all:
            return True

        keys = {_carrier_key(offer.carrier), _carrier_key(carrier_display_name(offer.carrier))}
        if keys & self._carriers:
            return True

        service = offer.service_level.lower()
        return any((key, service) in self._services for key in keys)


class RateFormatter:
    """Turns provider offers into sorted Snipcart shipping rates."""

    def __init__(
        self,
        rate_filter: RateFilter | None = None,
        discount: Decimal = Decimal("0"),
    ) -> None:
        self._filter = rate_filter or RateFilter()
        self._discount = discount

    def format(
        self,
        shipment_id: str,
        offers: Iterable[RateOffer],
        provider_code: str = "",
    ) -> Result[list[ShippingRate], ProviderError]:
        """
        Filter, discount, describe and sort offers.

        Offers with equal cost keep their provider order.

        Args:
            shipment_id: Shipment the offers belong to.
            offers: Raw provider offers.
            provider_code: Provider code used in parse errors.

        Returns:
            Result containing rates sorted by ascending cost, or a ParseError
            when an offer amount is not a number.
        """
        rates: list[ShippingRate] = []
        skipped = 0

        for offer in offers:
            if not self._filter.allowed(offer):
                skipped += 1
                continue

            amount = _parse_amount(offer.amount)
            if amount is None:
                return failure(
                    ParseError(
                        provider_code=provider_code,
                        message="Invalid rate amount",
                        details=f"rate {offer.id}: {offer.amount!r}",
                    )
                )

            rates.append(
                ShippingRate(
                    id=ShippingRate.compose_id(shipment_id, offer.id),
                    cost=discounted_cost(amount, self._discount),
                    description=describe(
                        offer.carrier,
                        offer.service_name or offer.service_level,
                        offer.delivery_days,
                        offer.guaranteed,
                    ),
                )
            )

        logger.debug(
            "Rates formatted",
            shipment_id=shipment_id,
            kept=len(rates),
            filtered_out=skipped,
        )
        return success(sorted(rates, key=lambda rate: rate.cost))
