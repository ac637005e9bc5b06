"""Country classification and VAT rate lookup."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

DEFAULT_HOME_COUNTRY = "US"

GRAMS_PER_OUNCE = Decimal("28.35")

# Standard VAT rates of the EU member states
EU_VAT_RATES: dict[str, Decimal] = {
    "AT": Decimal("0.20"),  # Austria
    "BE": Decimal("0.21"),  # Belgium
    "BG": Decimal("0.20"),  # Bulgaria
    "HR": Decimal("0.25"),  # Croatia
    "CY": Decimal("0.19"),  # Cyprus
    "CZ": Decimal("0.21"),  # Czech Republic
    "DK": Decimal("0.25"),  # Denmark
    "EE": Decimal("0.22"),  # Estonia
    "FI": Decimal("0.255"),  # Finland
    "FR": Decimal("0.20"),  # France
    "DE": Decimal("0.19"),  # Germany
    "GR": Decimal("0.24"),  # Greece
    "HU": Decimal("0.27"),  # Hungary
    "IE": Decimal("0.23"),  # Ireland
    "IT": Decimal("0.22"),  # Italy
    "LV": Decimal("0.21"),  # Latvia
    "LT": Decimal("0.21"),  # Lithuania
    "LU": Decimal("0.17"),  # Luxembourg
    "MT": Decimal("0.18"),  # Malta
    "NL": Decimal("0.21"),  # Netherlands
    "PL": Decimal("0.23"),  # Poland
    "PT": Decimal("0.23"),  # Portugal
    "RO": Decimal("0.19"),  # Romania
    "SK": Decimal("0.23"),  # Slovakia
    "SI": Decimal("0.22"),  # Slovenia
    "ES": Decimal("0.21"),  # Spain
    "SE": Decimal("0.25"),  # Sweden
}

EU_COUNTRIES: frozenset[str] = frozenset(EU_VAT_RATES)


def _normalize(country_code: str | None) -> str:
    return (country_code or "").strip().upper()


def is_domestic(country_code: str | None, home_country: str = DEFAULT_HOME_COUNTRY) -> bool:
    """Return True if the country is the configured home country."""
    return _normalize(country_code) == _normalize(home_country)


def is_international(country_code: str | None, home_country: str = DEFAULT_HOME_COUNTRY) -> bool:
    """Return True if shipping to the country needs customs paperwork."""
    return not is_domestic(country_code, home_country)


def is_eu_country(country_code: str | None) -> bool:
    """Return True for EU member states."""
    return _normalize(country_code) in EU_COUNTRIES


def vat_rate(country_code: str | None) -> Decimal | None:
    """
    Get the standard VAT rate of an EU member state.

    Args:
        country_code: ISO 3166-1 alpha-2 code, any case.

    Returns:
        The rate as a fraction (0.19 for 19%), or None outside the EU.
    """
    return EU_VAT_RATES.get(_normalize(country_code))


def grams_to_ounces(weight: Decimal) -> Decimal:
    """Convert grams to ounces, rounded to two decimals."""
    return (weight / GRAMS_PER_OUNCE).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
