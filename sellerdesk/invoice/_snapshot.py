"""
Invoice snapshot — immutable picture of an order at checkout time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sellerdesk.backend._types import OrderRecord, PaymentMethod, SellerProfile
from sellerdesk.phone._normalize import display


@dataclass(frozen=True, slots=True)
class InvoiceLine:
    name: str
    variant_name: str | None
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def label(self) -> str:
        return f"{self.name} ({self.variant_name})" if self.variant_name else self.name


@dataclass(frozen=True, slots=True)
class PaymentDetails:
    bank_name: str
    account_number: str
    account_owner: str


@dataclass(frozen=True, slots=True)
class InvoiceSnapshot:
    """
    What the buyer receives.

    total_amount is what is still owed; full_total_amount is before
    the partial payment.
    """

    order_number: str
    issued_at: datetime
    customer_name: str
    customer_phone: str
    customer_address: str
    customer_city_district: str
    lines: tuple[InvoiceLine, ...]
    courier_name: str | None
    service_name: str | None
    subtotal: Decimal
    shipping_cost: Decimal
    discount_amount: Decimal
    full_total_amount: Decimal
    partial_payment_amount: Decimal
    total_amount: Decimal
    payment_method: PaymentDetails | None = None
    shop_name: str = ""
    shop_logo_url: str | None = None
    seller_phone: str | None = None
    notes: str | None = None


def assemble_invoice(
    order: OrderRecord,
    *,
    payment_method: PaymentMethod | None = None,
    seller: SellerProfile | None = None,
) -> InvoiceSnapshot:
    """Build the invoice from the order as written, not from live form state."""
    data = order.data
    location = data.buyer.location
    city_district = (
        f"{location.district_name}, {location.city_name}"
        if location is not None
        else data.buyer.city_district_text
    )
    return InvoiceSnapshot(
        order_number=order.order_number,
        issued_at=order.updated_at,
        customer_name=data.buyer.name,
        customer_phone=display(data.buyer.phone),
        customer_address=data.buyer.address,
        customer_city_district=city_district,
        lines=tuple(
            InvoiceLine(
                name=line.name or line.product_id,
                variant_name=line.variant_name,
                unit_price=line.unit_price,
                quantity=line.quantity,
            )
            for line in data.items
        ),
        courier_name=data.shipping.courier_name,
        service_name=data.shipping.service_name,
        subtotal=data.subtotal,
        shipping_cost=data.shipping_fee,
        discount_amount=data.discount_amount,
        full_total_amount=data.partial_payment.amount + data.total_amount,
        partial_payment_amount=data.partial_payment.amount,
        total_amount=data.total_amount,
        payment_method=(
            PaymentDetails(payment_method.bank_name, payment_method.account_number, payment_method.account_owner)
            if payment_method is not None
            else None
        ),
        shop_name=seller.shop_name if seller else "",
        shop_logo_url=seller.logo_url if seller else None,
        seller_phone=display(seller.phone) if seller and seller.phone else None,
        notes=data.notes,
    )


__all__ = (
    "InvoiceLine",
    "PaymentDetails",
    "InvoiceSnapshot",
    "assemble_invoice",
)
