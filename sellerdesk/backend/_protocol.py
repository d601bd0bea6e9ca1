"""
Backend protocol — the data store the checkout core runs against.

Every method returns Result. Implementations catch their own driver
exceptions and classify them: reads fail as COLLABORATOR_UNAVAILABLE,
writes as WRITE_FAILURE.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Protocol

from kungfu import Result

from sellerdesk._errors import CheckoutError
from sellerdesk._types import (
    CartLine,
    CourierId,
    LineKey,
    OrderId,
    PaymentMethodId,
    SellerId,
    ServiceId,
)
from sellerdesk.backend._types import (
    OrderRecord,
    OrderStatus,
    OrderWrite,
    PaymentMethod,
    ResolvedLocation,
    SellerProfile,
)
from sellerdesk.shipping._types import Courier, CourierService


def format_order_number(prefix: str, day: date, sequence: int) -> str:
    """
    Example:
        format_order_number("ORD", date(2024, 3, 9), 7)  # "ORD-20240309-0007"
    """
    return f"{prefix}-{day:%Y%m%d}-{sequence:04d}"


class Backend(Protocol):
    """
    Order-management data store.

    Note: insert_order is the only place an order number is minted.
    update_order never touches it.
    """

    # ── cart ──────────────────────────────────────────────────────────────────

    async def list_cart(self, seller_id: SellerId) -> Result[tuple[CartLine, ...], CheckoutError]: ...

    async def add_cart_line(self, seller_id: SellerId, line: CartLine) -> Result[None, CheckoutError]:
        """Same (product, variant) already in cart → quantities add up."""
        ...

    async def set_cart_quantity(
        self, seller_id: SellerId, key: LineKey, quantity: int
    ) -> Result[None, CheckoutError]:
        """quantity <= 0 removes the line. Unknown key is a no-op."""
        ...

    async def clear_cart(self, seller_id: SellerId) -> Result[None, CheckoutError]: ...

    # ── orders ────────────────────────────────────────────────────────────────

    async def get_order(self, order_id: OrderId) -> Result[OrderRecord | None, CheckoutError]: ...

    async def find_orders(
        self,
        seller_id: SellerId,
        *,
        status: OrderStatus | None = None,
        phone: str | None = None,
    ) -> Result[tuple[OrderRecord, ...], CheckoutError]:
        """Exact-match filters, most recently updated first."""
        ...

    async def insert_order(self, write: OrderWrite) -> Result[OrderRecord, CheckoutError]: ...

    async def update_order(self, order_id: OrderId, write: OrderWrite) -> Result[OrderRecord, CheckoutError]: ...

    # ── carriers ──────────────────────────────────────────────────────────────

    async def list_couriers(self) -> Result[tuple[Courier, ...], CheckoutError]: ...

    async def list_services(self, courier_id: CourierId) -> Result[tuple[CourierService, ...], CheckoutError]: ...

    async def courier_preferences(self, seller_id: SellerId) -> Result[Mapping[CourierId, bool], CheckoutError]: ...

    async def service_preferences(self, seller_id: SellerId) -> Result[Mapping[ServiceId, bool], CheckoutError]: ...

    async def set_courier_preference(
        self, seller_id: SellerId, courier_id: CourierId, enabled: bool
    ) -> Result[None, CheckoutError]: ...

    async def set_service_preference(
        self, seller_id: SellerId, service_id: ServiceId, enabled: bool
    ) -> Result[None, CheckoutError]: ...

    # ── payment / seller / regions ───────────────────────────────────────────

    async def list_payment_methods(self, seller_id: SellerId) -> Result[tuple[PaymentMethod, ...], CheckoutError]: ...

    async def get_payment_method(
        self, method_id: PaymentMethodId
    ) -> Result[PaymentMethod | None, CheckoutError]: ...

    async def get_seller(self, seller_id: SellerId) -> Result[SellerProfile | None, CheckoutError]: ...

    async def search_regions(self, text: str, limit: int = 10) -> Result[tuple[ResolvedLocation, ...], CheckoutError]:
        """Case-insensitive substring match on district and city names."""
        ...

    async def get_region(self, district_id: str) -> Result[ResolvedLocation | None, CheckoutError]: ...


__all__ = (
    "Backend",
    "format_order_number",
)
