"""Tax assessment for the taxes.calculate event."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from core.logging import get_logger
from services.countries import vat_rate
from services.taxes.types import TaxAssessmentRequest, TaxLine

if TYPE_CHECKING:
    from core.config import TaxSettings

logger = get_logger(__name__)

CENTS = Decimal("0.01")


def vat_percentage(rate: Decimal) -> int:
    """Rate as a whole percentage, rounded half up (0.255 -> 26)."""
    return int((rate * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class TaxAssessor:
    """
    Computes tax lines for a cart.

    EU destinations get a single VAT line at the member state's standard
    rate. Every other destination gets one zero-rate line with the
    configured domestic label.
    """

    def __init__(self, config: TaxSettings) -> None:
        """
        Initialize the assessor.

        Args:
            config: Tax settings holding the domestic line labels.
        """
        self._config = config

    def assess(self, request: TaxAssessmentRequest) -> list[TaxLine]:
        """
        Assess the taxes of a request.

        Args:
            request: Country and items total to assess.

        Returns:
            One or more tax lines; never empty.
        """
        rate = vat_rate(request.country)

        if rate is None:
            logger.debug("Domestic tax line applied", country=request.country)
            return [self._domestic_line()]

        country = request.country.strip().upper()
        percent = vat_percentage(rate)
        amount = (request.items_total * rate).quantize(CENTS, rounding=ROUND_HALF_UP)

        logger.info(
            "VAT assessed",
            country=country,
            rate=str(rate),
            items_total=str(request.items_total),
            amount=str(amount),
        )
        return [
            TaxLine(
                name=f"VAT {country} {percent}%",
                amount=amount,
                number_for_invoice=f"VAT-{country}-{percent}",
                rate=rate,
            )
        ]

    def _domestic_line(self) -> TaxLine:
        return TaxLine(
            name=self._config.domestic_name,
            amount=Decimal("0.00"),
            number_for_invoice=self._config.domestic_invoice_number,
            rate=Decimal("0"),
        )
