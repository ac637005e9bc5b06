"""Shipping rate pipeline package."""

from services.shipping.customs import CustomsAssembler, CustomsAssembly
from services.shipping.formatter import RateFilter, RateFormatter, describe, discounted_cost
from services.shipping.orchestrator import ShipmentOrchestrator
from services.shipping.types import RatesOutcome, ShipmentState, ShippingError, ShippingRate

__all__ = [
    "CustomsAssembler",
    "CustomsAssembly",
    "RateFilter",
    "RateFormatter",
    "RatesOutcome",
    "ShipmentOrchestrator",
    "ShipmentState",
    "ShippingError",
    "ShippingRate",
    "describe",
    "discounted_cost",
]
