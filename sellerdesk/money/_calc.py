"""
Money calculator — subtotal, discount, fee, partial payment, payable.

Pure and exact: Decimal throughout, flooring happens only in display helpers.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal, ROUND_FLOOR

from sellerdesk._types import CartLine, ZERO
from sellerdesk.money._types import DiscountKind, DiscountSpec, NO_DISCOUNT, Totals


_HUNDRED = Decimal(100)


def _clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(value, high))


def subtotal(lines: Iterable[CartLine]) -> Decimal:
    return sum((line.line_total for line in lines), ZERO)


def discount_amount(base: Decimal, discount: DiscountSpec) -> Decimal:
    """
    Discount for a given subtotal, always within [0, base].

    Example:
        discount_amount(Decimal(100000), DiscountSpec.percentage(10))   # 10000
        discount_amount(Decimal(20000), DiscountSpec.nominal(999999))   # 20000
    """
    value = max(discount.value, ZERO)
    match discount.kind:
        case DiscountKind.PERCENTAGE:
            amount = base * min(value, _HUNDRED) / _HUNDRED
        case DiscountKind.NOMINAL:
            amount = min(value, base)
    return _clamp(amount, ZERO, base)


def compute_totals(
    lines: Iterable[CartLine],
    discount: DiscountSpec = NO_DISCOUNT,
    shipping_fee: Decimal = ZERO,
    partial_payment: Decimal = ZERO,
) -> Totals:
    """
    Derive every amount from the current inputs.

    Negative fee or partial payment count as zero. Partial payment
    above the total is capped at the total.
    """
    base = subtotal(lines)
    discount_value = discount_amount(base, discount)
    fee = max(shipping_fee, ZERO)
    total = max(base - discount_value + fee, ZERO)
    partial = _clamp(partial_payment, ZERO, total)
    return Totals(
        subtotal=base,
        discount_amount=discount_value,
        shipping_fee=fee,
        total=total,
        partial_payment=partial,
        payable_now=max(total - partial, ZERO),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Display
# ═══════════════════════════════════════════════════════════════════════════════


def display_amount(amount: Decimal) -> int:
    """Floor to whole rupiah."""
    return int(amount.to_integral_value(rounding=ROUND_FLOOR))


def format_rupiah(amount: Decimal) -> str:
    """
    Example:
        format_rupiah(Decimal("105000.75"))  # "Rp 105.000"
    """
    whole = display_amount(amount)
    sign = "-" if whole < 0 else ""
    return f"{sign}Rp {abs(whole):,}".replace(",", ".")


__all__ = (
    "subtotal",
    "discount_amount",
    "compute_totals",
    "display_amount",
    "format_rupiah",
)
