"""
HTTP request/response models.

Requests convert with `to_domain()`, responses build with `from_domain(...)`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from sellerdesk._errors import CheckoutError
from sellerdesk.backend._codec import LineModel
from sellerdesk.backend._types import OrderRecord
from sellerdesk.checkout._events import (
    AddLine,
    Event,
    RemoveLine,
    SetAddress,
    SetDiscount,
    SetManualFee,
    SetName,
    SetNotes,
    SetPartialPayment,
    SetPaymentMethod,
    SetPhone,
    SetQuantity,
)
from sellerdesk.checkout._orchestrator import CheckoutOrchestrator, CheckoutOutcome
from sellerdesk.checkout._state import to_snapshot
from sellerdesk.money._types import DiscountKind, DiscountSpec, Totals
from sellerdesk.overlay._snapshot import CourierModel, FormSnapshot, QuoteModel, ServiceModel


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class LineIn(LineModel):
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = Field(ge=0)


class EventIn(BaseModel):
    """
    One form edit.

    Example bodies:
        {"field": "phone", "value": "081234567890"}
        {"field": "discount", "discount_kind": "percentage", "amount": "10"}
        {"field": "quantity", "product_id": "p1", "quantity": 3}
    """

    field: Literal[
        "phone",
        "name",
        "address",
        "city_district",
        "district",
        "carrier",
        "service",
        "manual_fee",
        "discount",
        "partial_payment",
        "payment_method",
        "notes",
        "add_line",
        "quantity",
        "remove_line",
    ]
    value: str | None = None
    amount: Decimal = Decimal(0)
    discount_kind: Literal["percentage", "nominal"] = "nominal"
    line: LineIn | None = None
    product_id: str | None = None
    variant_id: str | None = None
    quantity: int = 0

    def to_domain(self) -> Event | None:
        """The plain event, or None for fields that need a session lookup."""
        key = (self.product_id or "", self.variant_id)
        match self.field:
            case "phone":
                return SetPhone(self.value or "")
            case "name":
                return SetName(self.value or "")
            case "address":
                return SetAddress(self.value or "")
            case "manual_fee":
                return SetManualFee(self.amount)
            case "discount":
                return SetDiscount(DiscountSpec(DiscountKind(self.discount_kind), self.amount))
            case "partial_payment":
                return SetPartialPayment(self.amount)
            case "payment_method":
                return SetPaymentMethod(self.value)
            case "notes":
                return SetNotes(self.value)
            case "add_line" if self.line is not None:
                return AddLine(self.line.to_domain())
            case "quantity":
                return SetQuantity(key, self.quantity)
            case "remove_line":
                return RemoveLine(key)
            case _:
                return None


class DraftIn(BaseModel):
    exit_edit: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorOut(BaseModel):
    kind: str
    message: str
    field: str | None = None

    @classmethod
    def from_domain(cls, err: CheckoutError) -> ErrorOut:
        return cls(kind=err.kind.name.lower(), message=err.message, field=err.field)


class TotalsOut(BaseModel):
    subtotal: Decimal
    discount_amount: Decimal
    shipping_fee: Decimal
    total: Decimal
    partial_payment: Decimal
    payable_now: Decimal

    @classmethod
    def from_domain(cls, t: Totals) -> TotalsOut:
        return cls(
            subtotal=t.subtotal,
            discount_amount=t.discount_amount,
            shipping_fee=t.shipping_fee,
            total=t.total,
            partial_payment=t.partial_payment,
            payable_now=t.payable_now,
        )


class CheckoutOut(BaseModel):
    phase: str
    form: FormSnapshot
    totals: TotalsOut
    quotes: list[QuoteModel]
    carriers: list[CourierModel]
    services: list[ServiceModel]
    draft_candidate: str | None = None
    warnings: list[ErrorOut] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, orchestrator: CheckoutOrchestrator) -> CheckoutOut:
        """Current session view; drains the orchestrator's pending warnings."""
        return cls(
            phase=orchestrator.phase.name.lower(),
            form=to_snapshot(orchestrator.state),
            totals=TotalsOut.from_domain(orchestrator.totals),
            quotes=[QuoteModel.from_domain(q) for q in orchestrator.quotes.quotes],
            carriers=[CourierModel.from_domain(c) for c in orchestrator.carriers],
            services=[ServiceModel.from_domain(s) for s in orchestrator.carrier_services],
            draft_candidate=orchestrator.draft_candidate,
            warnings=[ErrorOut.from_domain(w) for w in orchestrator.take_warnings()],
        )


class OrderOut(BaseModel):
    id: str
    order_number: str
    status: str
    total_amount: Decimal

    @classmethod
    def from_domain(cls, order: OrderRecord) -> OrderOut:
        return cls(
            id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            total_amount=order.data.total_amount,
        )


class SubmitOut(BaseModel):
    order: OrderOut
    invoice_text: str | None = None
    warnings: list[ErrorOut] = Field(default_factory=list)
    checkout: CheckoutOut

    @classmethod
    def from_domain(cls, outcome: CheckoutOutcome, orchestrator: CheckoutOrchestrator) -> SubmitOut:
        rendered = outcome.rendered
        text = rendered.decode("utf-8") if isinstance(rendered, bytes) else rendered
        return cls(
            order=OrderOut.from_domain(outcome.order),
            invoice_text=text,
            warnings=[ErrorOut.from_domain(w) for w in outcome.warnings],
            checkout=CheckoutOut.from_domain(orchestrator),
        )


class AddedOut(BaseModel):
    added_to: Literal["session", "cart"]


__all__ = (
    "LineIn",
    "EventIn",
    "DraftIn",
    "ErrorOut",
    "TotalsOut",
    "CheckoutOut",
    "OrderOut",
    "SubmitOut",
    "AddedOut",
)
