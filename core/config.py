"""
Application configuration using Pydantic Settings.

This module provides typed and validated settings for the webhook service,
with support for environment variables and .env files. Components receive
the section they need through their constructor; nothing below is read as
ambient global state outside of the Django views.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class SenderAddress(BaseModel):
    """Ship-from address used for every shipment."""

    name: str = ""
    company: str = ""
    address1: str = ""
    address2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "US"
    phone: str = ""
    email: str = ""


class ParcelTemplate(BaseModel):
    """Default parcel dimensions; weight and units are filled per request."""

    length: Decimal = Decimal("30")
    width: Decimal = Decimal("20")
    height: Decimal = Decimal("10")
    weight: Decimal = Decimal("0")


class SnipcartSettings(BaseSettings):
    """Snipcart API settings used for webhook authenticity checks."""

    model_config = SettingsConfigDict(env_prefix="SNIPCART_")

    api_key: SecretStr = Field(default=SecretStr(""), description="Snipcart secret API key")
    validation_url: str = Field(
        default="https://app.snipcart.com/api/requestvalidation/",
        description="Request validation endpoint; the token is appended to it",
    )

    @property
    def is_configured(self) -> bool:
        """Check if the Snipcart API key is configured."""
        return bool(self.api_key.get_secret_value())


class ShippoSettings(BaseSettings):
    """Shippo API settings."""

    model_config = SettingsConfigDict(env_prefix="SHIPPO_")

    api_key: SecretStr = Field(default=SecretStr(""), description="Shippo API token")

    @property
    def is_configured(self) -> bool:
        """Check if the Shippo API token is configured."""
        return bool(self.api_key.get_secret_value())


class EasyPostSettings(BaseSettings):
    """EasyPost API settings."""

    model_config = SettingsConfigDict(env_prefix="EASYPOST_")

    api_key: SecretStr = Field(default=SecretStr(""), description="EasyPost API key")

    @property
    def is_configured(self) -> bool:
        """Check if the EasyPost API key is configured."""
        return bool(self.api_key.get_secret_value())


class ShippingSettings(BaseSettings):
    """Shipment, customs and rate presentation settings."""

    model_config = SettingsConfigDict(env_prefix="SHIPPING_")

    provider: Literal["shippo", "easypost"] = Field(
        default="shippo", description="Rate provider implementation to use"
    )
    home_country: str = Field(default="US", description="Domestic ISO country code")
    weight_unit: str = Field(default="g", description="Weight unit of order weights")
    dimension_unit: str = Field(default="cm", description="Parcel dimension unit")
    manufacture_country: str = Field(default="US", description="Customs origin country")
    sender_address: SenderAddress = Field(default_factory=SenderAddress)
    default_parcel: ParcelTemplate = Field(default_factory=ParcelTemplate)
    allowed_services: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Carrier or carrier:service_level allow-list (empty allows all)",
    )
    discount: Decimal = Field(default=Decimal("0"), ge=0, description="Flat per-order discount")
    ein: str = Field(default="", description="Exporter EIN")
    ioss: str = Field(default="", description="EU IOSS number")
    ioss_issuing_country: str = Field(default="ES", description="Country that issued the IOSS")
    customs_signer: str = Field(default="", description="Customs certifier name")
    rates_timeout: float = Field(default=30.0, gt=0, description="Seconds to wait for rates")
    poll_interval: float = Field(default=1.0, gt=0, description="Seconds between status polls")
    validate_address_fields: bool = Field(
        default=True, description="Reject ship-to names that carriers will refuse"
    )

    @field_validator("allowed_services", mode="before")
    @classmethod
    def parse_allowed_services(cls, v: str | list[str]) -> list[str]:
        """Parse the allow-list from a comma-separated string or list."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v


class TaxSettings(BaseSettings):
    """Settings for the domestic (non-VAT) tax line."""

    model_config = SettingsConfigDict(env_prefix="TAX_")

    domestic_name: str = Field(
        default="New Hampshire (company does not meet threshold for sales tax in your state)",
        description="Name of the zero-rate domestic tax line",
    )
    domestic_invoice_number: str = Field(default="TAX-000")


class Settings(BaseSettings):
    """
    Main application settings.

    Aggregates all configuration sections and provides environment-specific
    settings loading.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")
    secret_key: SecretStr = Field(
        default=SecretStr("django-insecure-change-me-in-production"),
        description="Django secret key",
    )
    allowed_hosts: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["localhost", "127.0.0.1"],
        description="Allowed hosts",
    )
    build_version: str = Field(default="development", description="Reported by /health/")
    log_level: str = Field(default="INFO", description="Minimum log level")

    # Sub-settings
    snipcart: SnipcartSettings = Field(default_factory=SnipcartSettings)
    shippo: ShippoSettings = Field(default_factory=ShippoSettings)
    easypost: EasyPostSettings = Field(default_factory=EasyPostSettings)
    shipping: ShippingSettings = Field(default_factory=ShippingSettings)
    tax: TaxSettings = Field(default_factory=TaxSettings)

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v: str | list[str]) -> list[str]:
        """Parse allowed hosts from comma-separated string or list."""
        if isinstance(v, str):
            return [h.strip() for h in v.split(",") if h.strip()]
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Configured Settings instance.
    """
    return Settings()
