"""
Money types — discount input and computed totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    NOMINAL = "nominal"


@dataclass(frozen=True, slots=True)
class DiscountSpec:
    """
    Seller-entered discount.

    PERCENTAGE: value is a percent of subtotal (clamped to 0..100 at compute time).
    NOMINAL: value is an amount (clamped to 0..subtotal at compute time).
    """

    kind: DiscountKind = DiscountKind.NOMINAL
    value: Decimal = Decimal(0)

    @staticmethod
    def percentage(value: Decimal | int | str) -> DiscountSpec:
        return DiscountSpec(DiscountKind.PERCENTAGE, Decimal(value))

    @staticmethod
    def nominal(value: Decimal | int | str) -> DiscountSpec:
        return DiscountSpec(DiscountKind.NOMINAL, Decimal(value))


NO_DISCOUNT = DiscountSpec()


@dataclass(frozen=True, slots=True)
class Totals:
    """
    Derived amounts for one form state.

    Invariants:
        0 <= discount_amount <= subtotal
        total = max(subtotal - discount_amount + shipping_fee, 0)
        payable_now = max(total - partial_payment, 0)
    """

    subtotal: Decimal
    discount_amount: Decimal
    shipping_fee: Decimal
    total: Decimal
    partial_payment: Decimal
    payable_now: Decimal

    @property
    def remaining(self) -> Decimal:
        """Amount still owed; this is what an order row stores as total_amount."""
        return self.payable_now


__all__ = (
    "DiscountKind",
    "DiscountSpec",
    "NO_DISCOUNT",
    "Totals",
)
