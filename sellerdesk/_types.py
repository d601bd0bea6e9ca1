"""
Core types for sellerdesk.

Re-exports from kungfu + identifiers and the cart line shared by every component.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Identifiers
# ═══════════════════════════════════════════════════════════════════════════════

type SellerId = str
"""Identity of the seller operating the tool (owner of carts, orders, preferences)."""

type OrderId = str
type ProductId = str
type VariantId = str
type CourierId = str
type ServiceId = str
type PaymentMethodId = str

type LineKey = tuple[ProductId, VariantId | None]
"""Identity of a cart line for merging: same product + same variant."""

ZERO = Decimal(0)

# ═══════════════════════════════════════════════════════════════════════════════
# Cart Line
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One product (optionally one variant) in the active cart.

    name / image / variant_name are display fields copied into
    the order's line-item snapshot at save time.
    """

    product_id: ProductId
    quantity: int
    unit_price: Decimal
    variant_id: VariantId | None = None
    note: str | None = None
    name: str = ""
    image: str | None = None
    variant_name: str | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")
        if self.unit_price < 0:
            raise ValueError(f"unit_price must be >= 0, got {self.unit_price}")

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.variant_id)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> CartLine:
        return replace(self, quantity=quantity)


def merge_line(lines: tuple[CartLine, ...], added: CartLine) -> tuple[CartLine, ...]:
    """
    Add a line to a cart: same (product, variant) sums quantities, else appends.

    Example:
        merge_line((tea_x2,), tea_x1)   # (tea_x3,)
        merge_line((tea_x2,), coffee)   # (tea_x2, coffee)
    """
    for i, line in enumerate(lines):
        if line.key == added.key:
            merged = line.with_quantity(line.quantity + added.quantity)
            return lines[:i] + (merged,) + lines[i + 1:]
    return lines + (added,)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Identifiers
    "SellerId",
    "OrderId",
    "ProductId",
    "VariantId",
    "CourierId",
    "ServiceId",
    "PaymentMethodId",
    "LineKey",
    "ZERO",
    # Cart
    "CartLine",
    "merge_line",
)
