"""
Pytest configuration and fixtures for the test suite.

This module contains shared fixtures used across all tests.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from django.test import Client

from core.config import SenderAddress, ShippingSettings, TaxSettings
from core.result import success
from services.providers.base import RateOffer, Shipment, ShipmentStatus
from services.snipcart.types import Order


@pytest.fixture()
def test_client() -> Client:
    """Return a Django test client."""
    return Client()


def order_payload(country: str = "US", **overrides: Any) -> dict[str, Any]:
    """Build a Snipcart order payload the way the webhook sends it."""
    payload: dict[str, Any] = {
        "invoiceNumber": "SNIP-1001",
        "token": "7a1f2d3c-order-token",
        "currency": "usd",
        "email": "jon.doe@example.com",
        "shipToBillingAddress": False,
        "shippingAddress": {
            "fullName": "Jon Doe",
            "company": None,
            "address1": "1 Main Street",
            "address2": None,
            "city": "Springfield",
            "province": "IL",
            "postalCode": "62701",
            "country": country,
            "phone": "555-0100",
        },
        "billingAddress": None,
        "items": [
            {
                "id": "SKU-1",
                "name": "Ceramic Mug",
                "price": 20.0,
                "quantity": 2,
                "totalPrice": 40.0,
                "weight": 350,
                "shippable": True,
                "customFields": [{"name": "hs_code", "value": "6912.00"}],
            },
            {
                "id": "SKU-2",
                "name": "Gift Card",
                "price": 25.0,
                "quantity": 1,
                "totalPrice": 25.0,
                "weight": 0,
                "shippable": False,
                "customFields": None,
            },
        ],
        "totalWeight": 700,
        "itemsTotal": 65.0,
        "total": 65.0,
        "taxesTotal": 0,
        "shippingFees": 0,
        "shippingRateUserDefinedId": None,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def domestic_order() -> Order:
    """Return a decoded domestic order."""
    return Order.model_validate(order_payload("US"))


@pytest.fixture()
def eu_order() -> Order:
    """Return a decoded order shipping to Germany."""
    return Order.model_validate(order_payload("DE"))


@pytest.fixture()
def canada_order() -> Order:
    """Return a decoded order shipping to Canada."""
    return Order.model_validate(order_payload("CA"))


@pytest.fixture()
def shipping_settings() -> ShippingSettings:
    """Return shipping settings with known values."""
    return ShippingSettings(
        provider="shippo",
        home_country="US",
        weight_unit="g",
        dimension_unit="cm",
        manufacture_country="US",
        sender_address=SenderAddress(
            name="Jane Shipper",
            company="Mugs Inc",
            address1="10 Warehouse Rd",
            city="Concord",
            state="NH",
            postal_code="03301",
            country="US",
            phone="555-0199",
            email="shipping@example.com",
        ),
        allowed_services=[],
        discount=Decimal("0"),
        ein="12-3456789",
        ioss="IM7240000000",
        ioss_issuing_country="ES",
        customs_signer="Jane Shipper",
        rates_timeout=5.0,
        poll_interval=0.01,
        validate_address_fields=True,
    )


@pytest.fixture()
def tax_settings() -> TaxSettings:
    """Return tax settings with the default domestic line."""
    return TaxSettings()


def rate_offers() -> list[RateOffer]:
    """Return a typical unsorted set of provider offers."""
    return [
        RateOffer(
            id="rate-ups",
            carrier="UPSDAP",
            service_level="UPSGround",
            amount="12.40",
            delivery_days=3,
        ),
        RateOffer(
            id="rate-usps",
            carrier="USPS",
            service_level="usps_priority",
            amount="8.15",
            service_name="Priority Mail",
            delivery_days=2,
        ),
        RateOffer(
            id="rate-fedex",
            carrier="FedExDefault",
            service_level="FEDEX_2_DAY",
            amount="21.00",
            delivery_days=2,
            guaranteed=True,
        ),
    ]


@pytest.fixture()
def mock_provider() -> MagicMock:
    """Return a rate provider whose calls all succeed."""
    provider = MagicMock()
    provider.provider_code = "shippo"
    provider.create_customs_item = AsyncMock(
        side_effect=[success("ci-1"), success("ci-2"), success("ci-3")]
    )
    provider.create_customs_declaration = AsyncMock(return_value=success("cd-1"))
    provider.create_shipment = AsyncMock(
        return_value=success(Shipment(id="shp-1", status=ShipmentStatus.QUEUED))
    )
    provider.get_shipment = AsyncMock(
        return_value=success(Shipment(id="shp-prior", status=ShipmentStatus.SUCCESS))
    )
    provider.await_ready = AsyncMock(
        return_value=success(Shipment(id="shp-1", status=ShipmentStatus.SUCCESS))
    )
    provider.get_rates = AsyncMock(return_value=success(rate_offers()))
    provider.close = AsyncMock()
    return provider


@pytest.fixture()
def make_order_payload() -> Any:
    """Return the order payload builder."""
    return order_payload


@pytest.fixture()
def offers() -> list[RateOffer]:
    """Return a typical unsorted set of provider offers."""
    return rate_offers()
