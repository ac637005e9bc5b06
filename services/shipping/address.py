"""Ship-to address checks carriers would otherwise reject."""

from __future__ import annotations

from typing import TYPE_CHECKING

from services.shipping.types import ShippingError

if TYPE_CHECKING:
    from services.snipcart.types import Address

MIN_NAME_WORDS = 2
MIN_FIRST_NAME_LENGTH = 3


def validate_ship_to_name(address: Address) -> list[ShippingError]:
    """
    Check the recipient name of a ship-to address.

    Carriers refuse international labels without a first and last name, so
    the customer is asked to fix it at checkout.

    Args:
        address: The ship-to address.

    Returns:
        Errors to show the customer; empty when the name is acceptable.
    """
    words = address.name.split()

    if len(words) < MIN_NAME_WORDS:
        return [
            ShippingError(
                key="invalid_address_name",
                message="Shipping Address name must be at least two words (ex. 'Jon D', 'Jon Doe')",
            )
        ]

    if len(words[0]) < MIN_FIRST_NAME_LENGTH:
        return [
            ShippingError(
                key="invalid_address_firstname_length",
                message="Shipping Address first name must be longer than two characters (ex: 'Jon')",
            )
        ]

    return []
