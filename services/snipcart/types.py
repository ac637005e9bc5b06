"""
Pydantic models for Snipcart webhook payloads.

Snipcart sends loosely-typed JSON with camelCase keys and frequent nulls.
These models accept that shape and expose snake_case, non-null attributes
to the rest of the pipeline. Decoded models are frozen.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

HS_CODE_FIELD = "hs_code"


class EventName(str, Enum):
    """Webhook event names handled by this service."""

    SHIPPING_RATES_FETCH = "shippingrates.fetch"
    TAXES_CALCULATE = "taxes.calculate"
    ORDER_COMPLETED = "order.completed"


class SnipcartModel(BaseModel):
    """Base model for Snipcart payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Address(SnipcartModel):
    """A shipping or billing address."""

    name: str = Field(default="", validation_alias=AliasChoices("name", "fullName", "full_name"))
    company: str = ""
    address1: str = ""
    address2: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country: str = ""
    phone: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        """Snipcart sends null for blank address fields."""
        return "" if v is None else v


class CustomField(SnipcartModel):
    """A product custom field (name/value pair)."""

    name: str = ""
    value: str | None = None


class LineItem(SnipcartModel):
    """
    A cart or order line item.

    Attributes:
        id: Product SKU.
        name: Display name, used as customs description.
        price: Unit price.
        quantity: Number of units.
        total_price: Line total (price x quantity, after item discounts).
        weight: Line item weight in the configured weight unit.
        shippable: Digital goods are not shippable.
        custom_fields: Arbitrary product fields; may carry the HS code.
    """

    id: str = ""
    name: str = ""
    price: Decimal = Decimal("0")
    quantity: int = 1
    total_price: Decimal = Decimal("0")
    weight: Decimal = Decimal("0")
    shippable: bool = True
    custom_fields: tuple[CustomField, ...] = ()

    @field_validator("weight", "price", "total_price", mode="before")
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        """Treat null numbers as zero."""
        return 0 if v is None else v

    @field_validator("custom_fields", mode="before")
    @classmethod
    def null_to_tuple(cls, v: Any) -> Any:
        """Treat null custom fields as none."""
        return () if v is None else v

    @property
    def hs_code(self) -> str | None:
        """Harmonized-system tariff code from the custom fields, if any."""
        for field in self.custom_fields:
            if field.name == HS_CODE_FIELD and field.value:
                return field.value
        return None


class Order(SnipcartModel):
    """
    Order (or cart) snapshot sent with shipping and order events.

    Attributes:
        invoice_number: Human-facing order identifier.
        token: Opaque Snipcart order token.
        shipping_rate_user_defined_id: Composite "<shipment>;<rate>" id of
            a previously chosen rate, if the customer already picked one.
    """

    invoice_number: str = ""
    token: str = ""
    currency: str = "usd"
    email: str = ""
    shipping_address: Address = Field(default_factory=Address)
    billing_address: Address = Field(default_factory=Address)
    ship_to_billing_address: bool = False
    items: tuple[LineItem, ...] = ()
    total_weight: Decimal = Decimal("0")
    items_total: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    taxes_total: Decimal = Decimal("0")
    shipping_fees: Decimal = Decimal("0")
    shipping_rate_user_defined_id: str = ""

    @field_validator(
        "invoice_number",
        "token",
        "email",
        "shipping_rate_user_defined_id",
        mode="before",
    )
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        """Treat null strings as empty."""
        return "" if v is None else v

    @field_validator(
        "total_weight", "items_total", "total", "taxes_total", "shipping_fees", mode="before"
    )
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        """Treat null numbers as zero."""
        return 0 if v is None else v

    @field_validator("shipping_address", "billing_address", mode="before")
    @classmethod
    def null_to_address(cls, v: Any) -> Any:
        """Treat a null address as blank."""
        return {} if v is None else v

    @property
    def ship_to(self) -> Address:
        """Address the parcel is shipped to."""
        if self.ship_to_billing_address:
            return self.billing_address
        return self.shipping_address

    @property
    def country(self) -> str:
        """Destination country code."""
        return self.ship_to.country

    @property
    def shippable_items(self) -> tuple[LineItem, ...]:
        """Line items that need to be physically shipped."""
        return tuple(item for item in self.items if item.shippable)


class TaxCart(SnipcartModel):
    """Cart snapshot sent with the taxes.calculate event."""

    currency: str = "usd"
    items: tuple[LineItem, ...] = ()
    shipping_address: Address = Field(default_factory=Address)
    billing_address: Address = Field(default_factory=Address)
    ship_to_billing_address: bool = False
    items_total: Decimal = Decimal("0")

    @field_validator("shipping_address", "billing_address", mode="before")
    @classmethod
    def null_to_address(cls, v: Any) -> Any:
        """Treat a null address as blank."""
        return {} if v is None else v

    @field_validator("items_total", mode="before")
    @classmethod
    def null_to_zero(cls, v: Any) -> Any:
        """Treat a null total as zero."""
        return 0 if v is None else v


class WebhookEnvelope(SnipcartModel):
    """
    Outer webhook envelope.

    Only the discriminator is interpreted here; ``content`` stays raw JSON
    until the event name says which model it should be decoded into.
    """

    event_name: str
    created_on: datetime | None = None
    content: Any = None

    def decode_order(self) -> Order:
        """Decode the content as an order snapshot."""
        return Order.model_validate(self.content)

    def decode_tax_cart(self) -> TaxCart:
        """Decode the content as a tax calculation cart."""
        return TaxCart.model_validate(self.content)
