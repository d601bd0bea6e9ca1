"""
Rate lookup — the external shipping-rate API and a table-driven stand-in.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

from sellerdesk.shipping._types import Quote


class RateLookup(Protocol):
    """
    Rate API.

    An unreachable destination is an empty list, never an exception.
    Exceptions mean the API itself is down.
    """

    async def quote(
        self,
        origin: str | None,
        destination: str,
        weight_grams: int,
        carrier_codes: Sequence[str],
    ) -> list[Quote]: ...


@dataclass(frozen=True, slots=True)
class Tariff:
    """Per-kilogram price of one carrier service."""

    courier_code: str
    service_code: str
    service_name: str
    per_kg: Decimal
    etd: str | None = None


@dataclass
class FlatRateLookup:
    """
    Rate table keyed by destination district.

    Weight rounds up to whole kilograms. Districts absent from the
    table get the default tariffs; districts listed in unreachable get [].

    Example:
        rates = FlatRateLookup(
            default=[Tariff("jne", "REG", "JNE Reguler", Decimal(9000))],
            unreachable={"9471040"},
        )
    """

    default: Sequence[Tariff] = ()
    by_district: Mapping[str, Sequence[Tariff]] = field(default_factory=dict)
    unreachable: set[str] = field(default_factory=set)
    calls: list[tuple[str | None, str, int, tuple[str, ...]]] = field(default_factory=list)

    async def quote(
        self,
        origin: str | None,
        destination: str,
        weight_grams: int,
        carrier_codes: Sequence[str],
    ) -> list[Quote]:
        self.calls.append((origin, destination, weight_grams, tuple(carrier_codes)))
        if destination in self.unreachable:
            return []

        kilos = max(1, math.ceil(weight_grams / 1000))
        tariffs = self.by_district.get(destination, self.default)
        return [
            Quote(
                courier_code=t.courier_code,
                service_code=t.service_code,
                service_name=t.service_name,
                cost=t.per_kg * kilos,
                etd=t.etd,
            )
            for t in tariffs
            if t.courier_code in carrier_codes
        ]


__all__ = (
    "RateLookup",
    "Tariff",
    "FlatRateLookup",
)
