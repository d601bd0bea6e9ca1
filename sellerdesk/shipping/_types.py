"""
Shipping types — carriers, services, seller preferences, quotes, selection.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum, auto

from sellerdesk._types import CourierId, ServiceId, ZERO


# ═══════════════════════════════════════════════════════════════════════════════
# Preference — Three-state Enablement
# ═══════════════════════════════════════════════════════════════════════════════


class Preference(Enum):
    """
    Seller's enablement record for one carrier or service.

    UNSET means the seller never touched it. Opt-out semantics:
    an absent record counts as enabled.
    """

    ENABLED = auto()
    DISABLED = auto()
    UNSET = auto()

    @staticmethod
    def of(flag: bool | None) -> Preference:
        if flag is None:
            return Preference.UNSET
        return Preference.ENABLED if flag else Preference.DISABLED


def effective(pref: Preference) -> bool:
    """Whether a carrier/service is usable given the seller's record."""
    return pref is not Preference.DISABLED


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Courier:
    id: CourierId
    code: str
    name: str
    is_active: bool = True
    logo_url: str | None = None


@dataclass(frozen=True, slots=True)
class CourierService:
    id: ServiceId
    courier_id: CourierId
    code: str
    name: str
    is_active: bool = True


# ═══════════════════════════════════════════════════════════════════════════════
# Quotes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Quote:
    """One rate returned by the rate lookup."""

    courier_code: str
    service_code: str
    service_name: str
    cost: Decimal
    etd: str | None = None


@dataclass(frozen=True, slots=True)
class QuoteSet:
    """
    Quotes for a destination plus the default pick.

    selected is None exactly when quotes is empty.
    """

    quotes: tuple[Quote, ...] = ()
    selected: Quote | None = None

    @property
    def empty(self) -> bool:
        return not self.quotes


NO_QUOTES = QuoteSet()


# ═══════════════════════════════════════════════════════════════════════════════
# Selection — Two-phase
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingSelection:
    """
    Carrier, then service.

    service is only ever set while carrier is set; choosing a
    carrier drops the service and its quote. manual_fee is the
    seller's extra charge on top of the quoted cost.
    """

    carrier: Courier | None = None
    service: CourierService | None = None
    quote: Quote | None = None
    quoted_cost: Decimal = ZERO
    manual_fee: Decimal = ZERO

    @property
    def fee(self) -> Decimal:
        return self.quoted_cost + self.manual_fee

    def with_carrier(self, carrier: Courier | None) -> ShippingSelection:
        return replace(self, carrier=carrier, service=None, quote=None, quoted_cost=ZERO)

    def with_service(self, service: CourierService | None) -> ShippingSelection:
        if self.carrier is None:
            return self
        if service is not None and service.courier_id != self.carrier.id:
            return self
        return replace(self, service=service)

    def with_quote(self, quote: Quote | None) -> ShippingSelection:
        if quote is None:
            return replace(self, quote=None, quoted_cost=ZERO)
        return replace(self, quote=quote, quoted_cost=quote.cost)

    def with_manual_fee(self, fee: Decimal) -> ShippingSelection:
        return replace(self, manual_fee=max(fee, ZERO))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Preference",
    "effective",
    "Courier",
    "CourierService",
    "Quote",
    "QuoteSet",
    "NO_QUOTES",
    "ShippingSelection",
)
