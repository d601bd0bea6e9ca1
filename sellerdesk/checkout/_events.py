"""
Checkout events — every field edit the form accepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sellerdesk._types import CartLine, LineKey, PaymentMethodId
from sellerdesk.backend._types import ResolvedLocation
from sellerdesk.money._types import DiscountSpec
from sellerdesk.shipping._types import Courier, CourierService, Quote


# ── buyer ─────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SetPhone:
    phone: str


@dataclass(frozen=True, slots=True)
class SetName:
    name: str


@dataclass(frozen=True, slots=True)
class SetAddress:
    address: str


@dataclass(frozen=True, slots=True)
class SetCityDistrict:
    """Free-text destination. Drops any resolved location."""

    text: str


@dataclass(frozen=True, slots=True)
class SetLocation:
    location: ResolvedLocation | None


# ── shipping ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SelectCarrier:
    carrier: Courier | None


@dataclass(frozen=True, slots=True)
class SelectService:
    service: CourierService | None


@dataclass(frozen=True, slots=True)
class ApplyQuote:
    quote: Quote | None


@dataclass(frozen=True, slots=True)
class SetManualFee:
    fee: Decimal


# ── money / payment ───────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SetDiscount:
    discount: DiscountSpec


@dataclass(frozen=True, slots=True)
class SetPartialPayment:
    amount: Decimal


@dataclass(frozen=True, slots=True)
class SetPaymentMethod:
    method_id: PaymentMethodId | None


@dataclass(frozen=True, slots=True)
class SetNotes:
    notes: str | None


# ── lines ─────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AddLine:
    line: CartLine


@dataclass(frozen=True, slots=True)
class SetQuantity:
    """quantity <= 0 removes the line."""

    key: LineKey
    quantity: int


@dataclass(frozen=True, slots=True)
class RemoveLine:
    key: LineKey


type Event = (
    SetPhone
    | SetName
    | SetAddress
    | SetCityDistrict
    | SetLocation
    | SelectCarrier
    | SelectService
    | ApplyQuote
    | SetManualFee
    | SetDiscount
    | SetPartialPayment
    | SetPaymentMethod
    | SetNotes
    | AddLine
    | SetQuantity
    | RemoveLine
)

LINE_EVENTS = (AddLine, SetQuantity, RemoveLine)

# Events after which shipping must be quoted again.
REQUOTE_EVENTS = (SetLocation, SetCityDistrict, SelectCarrier, *LINE_EVENTS)


__all__ = (
    "SetPhone",
    "SetName",
    "SetAddress",
    "SetCityDistrict",
    "SetLocation",
    "SelectCarrier",
    "SelectService",
    "ApplyQuote",
    "SetManualFee",
    "SetDiscount",
    "SetPartialPayment",
    "SetPaymentMethod",
    "SetNotes",
    "AddLine",
    "SetQuantity",
    "RemoveLine",
    "Event",
    "LINE_EVENTS",
    "REQUOTE_EVENTS",
)
