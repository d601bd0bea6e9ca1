"""
Location — buyer destination resolution with a free-text fallback.
"""

from sellerdesk.location._parse import (
    ParsedLocation,
    parse_city_district,
)
from sellerdesk.location._resolver import (
    LocationResolver,
    RegionLocationResolver,
    Resolution,
    resolve_location,
)


__all__ = (
    "ParsedLocation",
    "parse_city_district",
    "LocationResolver",
    "RegionLocationResolver",
    "Resolution",
    "resolve_location",
)
