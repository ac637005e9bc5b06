"""Factory for creating the configured rate provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

from services.providers.easypost import EasyPostAdapter, EasyPostClient
from services.providers.shippo import ShippoAdapter, ShippoClient

if TYPE_CHECKING:
    from collections.abc import Callable

    from core.config import Settings
    from services.providers.base import RateProvider


class ProviderNotConfiguredError(Exception):
    """Raised when the configured provider is unknown or has no credentials."""

    def __init__(self, provider_code: str, reason: str = "unknown provider") -> None:
        """Initialize with the provider code and reason."""
        self.provider_code = provider_code
        self.reason = reason
        super().__init__(f"Rate provider '{provider_code}' is not available: {reason}")


def _build_shippo(settings: Settings) -> RateProvider:
    if not settings.shippo.is_configured:
        raise ProviderNotConfiguredError("shippo", "SHIPPO_API_KEY is not set")
    client = ShippoClient(settings.shippo.api_key.get_secret_value())
    return ShippoAdapter(client, poll_interval=settings.shipping.poll_interval)


def _build_easypost(settings: Settings) -> RateProvider:
    if not settings.easypost.is_configured:
        raise ProviderNotConfiguredError("easypost", "EASYPOST_API_KEY is not set")
    client = EasyPostClient(settings.easypost.api_key.get_secret_value())
    return EasyPostAdapter(client, poll_interval=settings.shipping.poll_interval)


PROVIDER_BUILDERS: dict[str, Callable[[Settings], RateProvider]] = {
    "shippo": _build_shippo,
    "easypost": _build_easypost,
}


def build_provider(settings: Settings) -> RateProvider:
    """
    Create the rate provider selected by ``settings.shipping.provider``.

    Args:
        settings: Application settings.

    Returns:
        A RateProvider implementation.

    Raises:
        ProviderNotConfiguredError: If the provider is unknown or lacks credentials.
    """
    code = settings.shipping.provider
    builder = PROVIDER_BUILDERS.get(code)
    if builder is None:
        raise ProviderNotConfiguredError(code)
    return builder(settings)
