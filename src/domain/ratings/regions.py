"""Static country to region lookup used for regional standings."""

from __future__ import annotations

from typing import Final

EUROPE: Final[int] = 0
AMERICAS: Final[int] = 1
REST_OF_WORLD: Final[int] = 2

REGION_NAMES: Final[tuple[str, ...]] = ("Europe", "Americas", "Asia")

_EUROPE_CODES: Final[frozenset[str]] = frozenset(
    {
        "AD", "AL", "AM", "AT", "AZ", "BA", "BE", "BG", "BY", "CH", "CY", "CZ", "DE",
        "DK", "EE", "ES", "FI", "FO", "FR", "GB", "GE", "GI", "GR", "HR", "HU", "IE",
        "IL", "IS", "IT", "KZ", "LI", "LT", "LU", "LV", "MC", "MD", "ME", "MK", "MT",
        "NL", "NO", "PL", "PT", "RO", "RS", "RU", "SE", "SI", "SK", "SM", "TR", "UA",
        "UZ", "VA", "XK",
    }
)

_AMERICAS_CODES: Final[frozenset[str]] = frozenset(
    {
        "AG", "AR", "BB", "BO", "BR", "BS", "BZ", "CA", "CL", "CO", "CR", "CU", "DM",
        "DO", "EC", "GD", "GT", "GY", "HN", "HT", "JM", "KN", "LC", "MX", "NI", "PA",
        "PE", "PR", "PY", "SR", "SV", "TT", "US", "UY", "VC", "VE",
    }
)


def region_of(country_iso: str) -> int:
    """Bucket an ISO 3166 alpha-2 code into Europe, Americas or rest of world."""
    code = (country_iso or "").strip().upper()
    if code in _EUROPE_CODES:
        return EUROPE
    if code in _AMERICAS_CODES:
        return AMERICAS
    return REST_OF_WORLD


__all__ = ["AMERICAS", "EUROPE", "REGION_NAMES", "REST_OF_WORLD", "region_of"]
