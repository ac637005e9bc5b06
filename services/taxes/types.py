"""Types for the tax assessor."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from services.snipcart.types import TaxCart


@dataclass(frozen=True, slots=True)
class TaxAssessmentRequest:
    """
    Input of a tax assessment.

    Attributes:
        country: ISO country code of the taxable address.
        items_total: Taxable items total.
        currency: Currency of the total.
    """

    country: str
    items_total: Decimal
    currency: str = "usd"

    @classmethod
    def from_cart(cls, cart: TaxCart) -> TaxAssessmentRequest:
        """Build a request from a cart, honouring "ship to billing address"."""
        address = cart.billing_address if cart.ship_to_billing_address else cart.shipping_address
        return cls(country=address.country, items_total=cart.items_total, currency=cart.currency)


@dataclass(frozen=True, slots=True)
class TaxLine:
    """
    A tax line returned to Snipcart.

    Attributes:
        name: Label shown to the customer.
        amount: Tax amount, rounded to cents.
        number_for_invoice: Label printed on the invoice.
        rate: Rate as a fraction (0.19 for 19%).
    """

    name: str
    amount: Decimal
    number_for_invoice: str
    rate: Decimal
