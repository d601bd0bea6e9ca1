"""
Money — discount and totals computation.

    from sellerdesk import money

    totals = money.compute_totals(
        lines,
        money.DiscountSpec.percentage(10),
        shipping_fee=Decimal(15000),
        partial_payment=Decimal(50000),
    )
    totals.payable_now
"""

from sellerdesk.money._types import (
    DiscountKind,
    DiscountSpec,
    NO_DISCOUNT,
    Totals,
)
from sellerdesk.money._calc import (
    subtotal,
    discount_amount,
    compute_totals,
    display_amount,
    format_rupiah,
)


__all__ = (
    "DiscountKind",
    "DiscountSpec",
    "NO_DISCOUNT",
    "Totals",
    "subtotal",
    "discount_amount",
    "compute_totals",
    "display_amount",
    "format_rupiah",
)
