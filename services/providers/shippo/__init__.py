"""Shippo rate provider package."""

from services.providers.shippo.adapter import ShippoAdapter
from services.providers.shippo.client import ShippoClient

__all__ = ["ShippoAdapter", "ShippoClient"]
