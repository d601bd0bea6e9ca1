"""
Checkout state — the form, the three session kinds, and their persisted shapes.

    CheckoutState = FreshCart | Draft | ExistingOrder

Every variant carries the same CheckoutForm; they differ only in
which order (if any) a save writes to.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum, auto

from sellerdesk._types import CartLine, OrderId, PaymentMethodId, SellerId, ZERO
from sellerdesk.backend._codec import LineModel, LocationModel
from sellerdesk.backend._types import (
    BuyerSnapshot,
    OrderRecord,
    OrderStatus,
    OrderWrite,
    PartialPayment,
    ResolvedLocation,
    ShippingSnapshot,
)
from sellerdesk.money._types import DiscountKind, DiscountSpec, NO_DISCOUNT, Totals
from sellerdesk.overlay._snapshot import CourierModel, FormSnapshot, QuoteModel, ServiceModel
from sellerdesk.phone._normalize import canonical
from sellerdesk.shipping._types import Courier, CourierService, Quote, ShippingSelection


# ═══════════════════════════════════════════════════════════════════════════════
# Phase
# ═══════════════════════════════════════════════════════════════════════════════


class Phase(Enum):
    LOADING = auto()
    READY = auto()
    VALIDATING = auto()
    SAVING_DRAFT = auto()
    CHECKING_OUT = auto()
    COMPLETED = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Form
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BuyerInfo:
    """
    Buyer fields as typed.

    location is set only when a structured lookup succeeded; otherwise
    city_district_text is all there is.
    """

    phone: str = ""
    name: str = ""
    address: str = ""
    city_district_text: str = ""
    location: ResolvedLocation | None = None

    @property
    def phone_canonical(self) -> str:
        return canonical(self.phone.strip())

    @property
    def destination(self) -> str | None:
        return self.location.district_id if self.location else None


@dataclass(frozen=True, slots=True)
class CheckoutForm:
    buyer: BuyerInfo = field(default_factory=BuyerInfo)
    shipping: ShippingSelection = field(default_factory=ShippingSelection)
    discount: DiscountSpec = NO_DISCOUNT
    partial_payment: Decimal = ZERO
    payment_method_id: PaymentMethodId | None = None
    notes: str | None = None
    lines: tuple[CartLine, ...] = ()

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


# ═══════════════════════════════════════════════════════════════════════════════
# Session Kinds
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class FreshCart:
    """New checkout from the seller's cart. Checkout mints a new order number."""

    form: CheckoutForm = field(default_factory=CheckoutForm)


@dataclass(frozen=True, slots=True)
class Draft:
    """Saved draft being continued. Saves update it in place."""

    order_id: OrderId
    order_number: str
    form: CheckoutForm = field(default_factory=CheckoutForm)


@dataclass(frozen=True, slots=True)
class ExistingOrder:
    """Placed order opened for editing. Saves keep its number and status."""

    order_id: OrderId
    order_number: str
    status: OrderStatus
    form: CheckoutForm = field(default_factory=CheckoutForm)


type CheckoutState = FreshCart | Draft | ExistingOrder


def with_form(state: CheckoutState, form: CheckoutForm) -> CheckoutState:
    return replace(state, form=form)


# ═══════════════════════════════════════════════════════════════════════════════
# Order Conversions
# ═══════════════════════════════════════════════════════════════════════════════


def form_from_order(order: OrderRecord) -> CheckoutForm:
    data = order.data
    ship = data.shipping
    carrier = (
        Courier(ship.courier_id, ship.courier_code or "", ship.courier_name or "")
        if ship.courier_id
        else None
    )
    service = (
        CourierService(ship.service_id, ship.courier_id, ship.service_code or "", ship.service_name or "")
        if carrier is not None and ship.service_id
        else None
    )
    quote = (
        Quote(ship.courier_code or "", ship.service_code or "", ship.service_name or "", ship.quoted_cost)
        if service is not None
        else None
    )
    return CheckoutForm(
        buyer=BuyerInfo(
            phone=data.buyer.phone,
            name=data.buyer.name,
            address=data.buyer.address,
            city_district_text=data.buyer.city_district_text,
            location=data.buyer.location,
        ),
        shipping=ShippingSelection(
            carrier=carrier,
            service=service,
            quote=quote,
            quoted_cost=ship.quoted_cost,
            manual_fee=ship.manual_fee,
        ),
        discount=data.discount,
        partial_payment=data.partial_payment.amount,
        payment_method_id=data.payment_method_id,
        notes=data.notes,
        lines=data.items,
    )


def from_order(order: OrderRecord) -> CheckoutState:
    """Draft rows resume as Draft; anything else is an ExistingOrder edit."""
    form = form_from_order(order)
    if order.status is OrderStatus.DRAFT:
        return Draft(order.id, order.order_number, form)
    return ExistingOrder(order.id, order.order_number, order.status, form)


def order_write(
    seller_id: SellerId,
    form: CheckoutForm,
    status: OrderStatus,
    totals: Totals,
) -> OrderWrite:
    """Snapshot the current form into an order write. Totals must be fresh."""
    buyer = form.buyer
    ship = form.shipping
    return OrderWrite(
        seller_id=seller_id,
        status=status,
        buyer=BuyerSnapshot(
            phone=buyer.phone_canonical,
            name=buyer.name.strip(),
            address=buyer.address.strip(),
            city_district_text=buyer.city_district_text.strip(),
            location=buyer.location,
        ),
        items=form.lines,
        shipping=ShippingSnapshot(
            courier_id=ship.carrier.id if ship.carrier else None,
            courier_code=ship.carrier.code if ship.carrier else None,
            courier_name=ship.carrier.name if ship.carrier else None,
            service_id=ship.service.id if ship.service else None,
            service_code=ship.service.code if ship.service else None,
            service_name=ship.service.name if ship.service else None,
            quoted_cost=ship.quoted_cost,
            manual_fee=ship.manual_fee,
        ),
        discount=form.discount,
        subtotal=totals.subtotal,
        discount_amount=totals.discount_amount,
        shipping_fee=totals.shipping_fee,
        total_amount=totals.payable_now,
        partial_payment=PartialPayment(amount=totals.partial_payment, remaining=totals.payable_now),
        payment_method_id=form.payment_method_id,
        notes=form.notes,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot Conversions
# ═══════════════════════════════════════════════════════════════════════════════


def to_snapshot(state: CheckoutState) -> FormSnapshot:
    form = state.form
    buyer = form.buyer
    ship = form.shipping
    snap = FormSnapshot(
        phone=buyer.phone,
        name=buyer.name,
        address=buyer.address,
        city_district_text=buyer.city_district_text,
        location=LocationModel.from_domain(buyer.location) if buyer.location else None,
        carrier=CourierModel.from_domain(ship.carrier) if ship.carrier else None,
        service=ServiceModel.from_domain(ship.service) if ship.service else None,
        quote=QuoteModel.from_domain(ship.quote) if ship.quote else None,
        quoted_cost=ship.quoted_cost,
        manual_fee=ship.manual_fee,
        discount_kind=form.discount.kind.value,
        discount_value=form.discount.value,
        partial_payment=form.partial_payment,
        payment_method_id=form.payment_method_id,
        notes=form.notes,
        lines=[LineModel.from_domain(line) for line in form.lines],
    )
    match state:
        case FreshCart():
            return snap
        case Draft(order_id, order_number):
            return snap.model_copy(update={
                "mode": "draft",
                "order_id": order_id,
                "order_number": order_number,
                "status": OrderStatus.DRAFT.value,
            })
        case ExistingOrder(order_id, order_number, status):
            return snap.model_copy(update={
                "mode": "existing",
                "order_id": order_id,
                "order_number": order_number,
                "status": status.value,
            })


def form_from_snapshot(snap: FormSnapshot) -> CheckoutForm:
    return CheckoutForm(
        buyer=BuyerInfo(
            phone=snap.phone,
            name=snap.name,
            address=snap.address,
            city_district_text=snap.city_district_text,
            location=snap.location.to_domain() if snap.location else None,
        ),
        shipping=ShippingSelection(
            carrier=snap.carrier.to_domain() if snap.carrier else None,
            service=snap.service.to_domain() if snap.carrier and snap.service else None,
            quote=snap.quote.to_domain() if snap.quote else None,
            quoted_cost=snap.quoted_cost,
            manual_fee=snap.manual_fee,
        ),
        discount=DiscountSpec(DiscountKind(snap.discount_kind), snap.discount_value),
        partial_payment=snap.partial_payment,
        payment_method_id=snap.payment_method_id,
        notes=snap.notes,
        lines=snap.cart_lines(),
    )


def from_snapshot(snap: FormSnapshot) -> CheckoutState:
    form = form_from_snapshot(snap)
    match snap.mode:
        case "draft" if snap.order_id and snap.order_number:
            return Draft(snap.order_id, snap.order_number, form)
        case "existing" if snap.order_id and snap.order_number:
            return ExistingOrder(
                snap.order_id,
                snap.order_number,
                OrderStatus(snap.status or OrderStatus.NEW.value),
                form,
            )
        case _:
            return FreshCart(form)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Phase",
    "BuyerInfo",
    "CheckoutForm",
    "FreshCart",
    "Draft",
    "ExistingOrder",
    "CheckoutState",
    "with_form",
    "form_from_order",
    "from_order",
    "order_write",
    "to_snapshot",
    "form_from_snapshot",
    "from_snapshot",
)
