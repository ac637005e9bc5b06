"""Types for the shipping rate pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

RATE_ID_SEPARATOR = ";"


class ShipmentState(str, Enum):
    """States of a rate-fetch run."""

    NEW = "new"
    SHIPMENT_LOOKUP = "shipment_lookup"
    CUSTOMS_PENDING = "customs_pending"
    SHIPMENT_REQUESTED = "shipment_requested"
    AWAITING_RATES = "awaiting_rates"
    RATES_READY = "rates_ready"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ShippingRate:
    """
    A rate offer in the shape Snipcart expects.

    Attributes:
        id: Composite "<shipment-id>;<rate-id>" replayed by Snipcart on
            later events for the same order.
        cost: Discounted cost, never negative.
        description: Human-readable carrier, service and arrival estimate.
    """

    id: str
    cost: Decimal
    description: str

    @staticmethod
    def compose_id(shipment_id: str, rate_id: str) -> str:
        """Build the composite user-defined rate id."""
        return f"{shipment_id}{RATE_ID_SEPARATOR}{rate_id}"

    @staticmethod
    def shipment_id_from(user_defined_id: str) -> str:
        """Recover the shipment id embedded in a composite rate id."""
        return user_defined_id.split(RATE_ID_SEPARATOR, 1)[0]


@dataclass(frozen=True, slots=True)
class ShippingError:
    """A checkout-blocking shipping error shown to the customer."""

    key: str
    message: str


@dataclass(frozen=True, slots=True)
class RatesOutcome:
    """
    Result of a rate-fetch run.

    Attributes:
        rates: Offers sorted by ascending cost.
        errors: Address problems; when present no provider call was made.
        shipment_id: Provider shipment the rates belong to.
        states: States the run went through, in order.
    """

    rates: tuple[ShippingRate, ...] = ()
    errors: tuple[ShippingError, ...] = ()
    shipment_id: str | None = None
    states: tuple[ShipmentState, ...] = ()

    @property
    def has_errors(self) -> bool:
        """Check if the run stopped on address errors."""
        return bool(self.errors)
