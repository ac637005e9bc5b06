"""Snipcart webhook payloads and request validation."""

from services.snipcart.client import RequestValidationError, SnipcartClient
from services.snipcart.types import (
    Address,
    CustomField,
    EventName,
    LineItem,
    Order,
    TaxCart,
    WebhookEnvelope,
)

__all__ = [
    "Address",
    "CustomField",
    "EventName",
    "LineItem",
    "Order",
    "RequestValidationError",
    "SnipcartClient",
    "TaxCart",
    "WebhookEnvelope",
]
