"""
Location text parsing — the unstructured fallback when no resolver is available.

Handles formats like:
    "Kota Bandung, Kec. Coblong"
    "Bandung, Coblong"
    "Kabupaten Sleman"
"""

from __future__ import annotations

import re
from dataclasses import dataclass


_CITY_PREFIX = re.compile(r"^(Kota|Kabupaten)\s+", re.IGNORECASE)
_DISTRICT_PREFIX = re.compile(r"^(Kec\.|Kecamatan)\s*", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ParsedLocation:
    city_name: str = ""
    district_name: str = ""

    @property
    def empty(self) -> bool:
        return not (self.city_name or self.district_name)


def parse_city_district(text: str) -> ParsedLocation:
    """
    Split "city, district" text and strip administrative prefixes.

    Example:
        parse_city_district("Kota Bandung, Kec. Coblong")
        # ParsedLocation(city_name="Bandung", district_name="Coblong")
    """
    cleaned = text.strip()
    if not cleaned:
        return ParsedLocation()

    parts = [p.strip() for p in cleaned.split(",")]
    if len(parts) < 2:
        return ParsedLocation(city_name=_CITY_PREFIX.sub("", cleaned))

    return ParsedLocation(
        city_name=_CITY_PREFIX.sub("", parts[0]),
        district_name=_DISTRICT_PREFIX.sub("", parts[1]),
    )


__all__ = (
    "ParsedLocation",
    "parse_city_district",
)
