"""Shipping rate provider adapters package."""

from services.providers.base import (
    CustomsDeclaration,
    CustomsItem,
    Parcel,
    RateOffer,
    RateProvider,
    Shipment,
    ShipmentAddress,
    ShipmentRequest,
    ShipmentStatus,
)
from services.providers.errors import ErrorCode, ProviderError
from services.providers.factory import ProviderNotConfiguredError, build_provider

__all__ = [
    "CustomsDeclaration",
    "CustomsItem",
    "ErrorCode",
    "Parcel",
    "ProviderError",
    "ProviderNotConfiguredError",
    "RateOffer",
    "RateProvider",
    "Shipment",
    "ShipmentAddress",
    "ShipmentRequest",
    "ShipmentStatus",
    "build_provider",
]
