"""
Shipping resolver — enabled carriers, enabled services, rate quoting.

    resolver = ShippingResolver(catalog, rates, policy)

    carriers = await resolver.enabled_carriers(seller_id)
    services = await resolver.services_for(seller_id, carrier)
    quotes = await resolver.quote(seller_id, district_id, item_count, carrier)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Protocol

from kungfu import Result, Ok, Error

from sellerdesk._config import CheckoutPolicy
from sellerdesk._errors import CheckoutError
from sellerdesk._types import CourierId, SellerId, ServiceId
from sellerdesk.lift import collaborator
from sellerdesk.shipping._rates import RateLookup
from sellerdesk.shipping._types import (
    Courier,
    CourierService,
    Preference,
    Quote,
    QuoteSet,
    NO_QUOTES,
    effective,
)


logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CarrierCatalog(Protocol):
    """
    Where carriers, services and seller preference records live.

    Preference mappings hold only explicit records: id -> enabled flag.
    """

    async def list_couriers(self) -> Result[tuple[Courier, ...], CheckoutError]: ...

    async def list_services(
        self, courier_id: CourierId
    ) -> Result[tuple[CourierService, ...], CheckoutError]: ...

    async def courier_preferences(
        self, seller_id: SellerId
    ) -> Result[Mapping[CourierId, bool], CheckoutError]: ...

    async def service_preferences(
        self, seller_id: SellerId
    ) -> Result[Mapping[ServiceId, bool], CheckoutError]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Pure Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def shipment_weight(item_count: int, policy: CheckoutPolicy = CheckoutPolicy()) -> int:
    """
    Grams to quote for.

    Example:
        shipment_weight(1)  # 1000 (minimum)
        shipment_weight(5)  # 2500
    """
    return max(policy.min_weight_grams, policy.grams_per_item * item_count)


def cheapest(quotes: Sequence[Quote]) -> Quote | None:
    """Lowest cost; on a tie the first one the rate API returned."""
    if not quotes:
        return None
    return min(quotes, key=lambda q: q.cost)


def match_service(services: Sequence[CourierService], quote: Quote) -> CourierService | None:
    code = quote.service_code.casefold()
    for service in services:
        if service.code.casefold() == code:
            return service
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Resolver
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingResolver:
    def __init__(
        self,
        catalog: CarrierCatalog,
        rates: RateLookup,
        policy: CheckoutPolicy = CheckoutPolicy(),
    ) -> None:
        self.catalog = catalog
        self.rates = rates
        self.policy = policy

    async def enabled_carriers(
        self, seller_id: SellerId
    ) -> Result[tuple[Courier, ...], CheckoutError]:
        """Active carriers the seller has not switched off."""
        match await self.catalog.list_couriers():
            case Error(err):
                return Error(err)
            case Ok(couriers):
                pass

        match await self.catalog.courier_preferences(seller_id):
            case Error(err):
                return Error(err)
            case Ok(prefs):
                pass

        return Ok(tuple(
            c for c in couriers
            if c.is_active and effective(Preference.of(prefs.get(c.id)))
        ))

    async def services_for(
        self, seller_id: SellerId, courier: Courier
    ) -> Result[tuple[CourierService, ...], CheckoutError]:
        """Active services of one carrier the seller has not switched off."""
        match await self.catalog.list_services(courier.id):
            case Error(err):
                return Error(err)
            case Ok(services):
                pass

        match await self.catalog.service_preferences(seller_id):
            case Error(err):
                return Error(err)
            case Ok(prefs):
                pass

        return Ok(tuple(
            s for s in services
            if s.is_active and effective(Preference.of(prefs.get(s.id)))
        ))

    async def quote(
        self,
        seller_id: SellerId,
        destination: str,
        item_count: int,
        carrier: Courier | None = None,
    ) -> Result[QuoteSet, CheckoutError]:
        """
        Ask the rate API for this destination and pick the cheapest.

        Restricted to the chosen carrier, else to every enabled carrier.
        Ok(NO_QUOTES) when no carrier is usable or no route exists.
        Error(COLLABORATOR_UNAVAILABLE) when the rate API fails or times out.
        """
        if carrier is not None:
            codes: tuple[str, ...] = (carrier.code,)
        else:
            match await self.enabled_carriers(seller_id):
                case Error(err):
                    return Error(err)
                case Ok(carriers):
                    codes = tuple(c.code for c in carriers)

        if not codes:
            return Ok(NO_QUOTES)

        weight = shipment_weight(item_count, self.policy)
        origin = self.policy.origin_district_id

        result = await collaborator(
            "rate lookup",
            lambda: self.rates.quote(origin, destination, weight, codes),
            within=self.policy.rate_lookup_timeout,
        )
        match result:
            case Ok(quotes):
                logger.debug(
                    "Quoted %d rates for %s (%dg, carriers=%s)",
                    len(quotes), destination, weight, ",".join(codes),
                )
                return Ok(QuoteSet(quotes=tuple(quotes), selected=cheapest(quotes)))
            case Error(err):
                logger.warning("Rate lookup failed for %s: %s", destination, err.message)
                return Error(err)


__all__ = (
    "CarrierCatalog",
    "shipment_weight",
    "cheapest",
    "match_service",
    "ShippingResolver",
)
