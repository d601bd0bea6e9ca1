"""
Location resolver — free text or district id to a structured region.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from kungfu import Result, Ok, Error

from sellerdesk._errors import CheckoutError
from sellerdesk.backend._protocol import Backend
from sellerdesk.backend._types import ResolvedLocation
from sellerdesk.lift import collaborator
from sellerdesk.location._parse import ParsedLocation, parse_city_district


logger = logging.getLogger(__name__)


class LocationResolver(Protocol):
    async def resolve_text(self, text: str) -> Result[ResolvedLocation | None, CheckoutError]: ...

    async def resolve_district(self, district_id: str) -> Result[ResolvedLocation | None, CheckoutError]: ...


class RegionLocationResolver:
    """Resolver over the backend's flat region table."""

    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    async def resolve_text(self, text: str) -> Result[ResolvedLocation | None, CheckoutError]:
        parsed = parse_city_district(text)
        if parsed.empty:
            return Ok(None)

        needle = parsed.district_name or parsed.city_name
        match await self.backend.search_regions(needle):
            case Error(err):
                return Error(err)
            case Ok(regions):
                pass

        city = parsed.city_name.casefold()
        for region in regions:
            if not parsed.district_name or city in region.city_name.casefold():
                return Ok(region)
        return Ok(None)

    async def resolve_district(self, district_id: str) -> Result[ResolvedLocation | None, CheckoutError]:
        return await self.backend.get_region(district_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Resolution with fallback
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Resolution:
    """
    Outcome of resolving buyer location text.

    location is None when the resolver is missing, failed or found nothing;
    parsed always carries the text-derived names.
    """

    parsed: ParsedLocation
    location: ResolvedLocation | None = None
    error: CheckoutError | None = None


async def resolve_location(resolver: LocationResolver | None, text: str) -> Resolution:
    """Structured lookup when possible, parsed text otherwise. Never fails."""
    parsed = parse_city_district(text)
    if resolver is None or parsed.empty:
        return Resolution(parsed=parsed)

    match await collaborator("location resolver", lambda: resolver.resolve_text(text)):
        case Ok(Ok(location)):
            return Resolution(parsed=parsed, location=location)
        case Ok(Error(err)) | Error(err):
            logger.warning("Location lookup degraded to text for %r: %s", text, err.message)
            return Resolution(parsed=parsed, error=err)


__all__ = (
    "LocationResolver",
    "RegionLocationResolver",
    "Resolution",
    "resolve_location",
)
