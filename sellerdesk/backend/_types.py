"""
Backend records — what the data store holds for orders, payments, sellers, regions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sellerdesk._types import CartLine, OrderId, PaymentMethodId, SellerId, ZERO
from sellerdesk.money._types import DiscountSpec, NO_DISCOUNT


# ═══════════════════════════════════════════════════════════════════════════════
# Order Status
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(Enum):
    DRAFT = "draft"
    NEW = "new"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def editable(self) -> bool:
        return self in (OrderStatus.DRAFT, OrderStatus.NEW)


# ═══════════════════════════════════════════════════════════════════════════════
# Location
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ResolvedLocation:
    """One row of the flat region table: a district with its city and province."""

    province_id: str
    province_name: str
    city_id: str
    city_name: str
    district_id: str
    district_name: str

    @property
    def label(self) -> str:
        return f"{self.district_name}, {self.city_name}, {self.province_name}"


# ═══════════════════════════════════════════════════════════════════════════════
# Order Snapshots
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BuyerSnapshot:
    phone: str
    name: str = ""
    address: str = ""
    city_district_text: str = ""
    location: ResolvedLocation | None = None


@dataclass(frozen=True, slots=True)
class ShippingSnapshot:
    """Carrier/service as chosen at save time, names denormalized."""

    courier_id: str | None = None
    courier_code: str | None = None
    courier_name: str | None = None
    service_id: str | None = None
    service_code: str | None = None
    service_name: str | None = None
    quoted_cost: Decimal = ZERO
    manual_fee: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class PartialPayment:
    amount: Decimal = ZERO
    remaining: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class OrderWrite:
    """
    Full content of one order insert/update.

    Note: total_amount is the amount still owed (partial payment already
    netted out), not the gross total.
    """

    seller_id: SellerId
    status: OrderStatus
    buyer: BuyerSnapshot
    items: tuple[CartLine, ...] = ()
    shipping: ShippingSnapshot = field(default_factory=ShippingSnapshot)
    discount: DiscountSpec = NO_DISCOUNT
    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    shipping_fee: Decimal = ZERO
    total_amount: Decimal = ZERO
    partial_payment: PartialPayment = field(default_factory=PartialPayment)
    payment_method_id: PaymentMethodId | None = None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class OrderRecord:
    """A persisted order. order_number is assigned on insert and never changes."""

    id: OrderId
    order_number: str
    created_at: datetime
    updated_at: datetime
    data: OrderWrite

    @property
    def seller_id(self) -> SellerId:
        return self.data.seller_id

    @property
    def status(self) -> OrderStatus:
        return self.data.status


# ═══════════════════════════════════════════════════════════════════════════════
# Payment / Seller
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentMethod:
    id: PaymentMethodId
    seller_id: SellerId
    bank_name: str
    account_number: str
    account_owner: str
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class SellerProfile:
    seller_id: SellerId
    shop_name: str
    phone: str | None = None
    logo_url: str | None = None
    origin_district_id: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "OrderStatus",
    "ResolvedLocation",
    "BuyerSnapshot",
    "ShippingSnapshot",
    "PartialPayment",
    "OrderWrite",
    "OrderRecord",
    "PaymentMethod",
    "SellerProfile",
)
