"""
Overlay snapshot — persisted JSON shape of a checkout form.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from sellerdesk._types import CartLine
from sellerdesk.backend._codec import LineModel, LocationModel
from sellerdesk.shipping._types import Courier, CourierService, Quote


Mode = Literal["fresh", "draft", "existing"]


class CourierModel(BaseModel):
    id: str
    code: str
    name: str
    is_active: bool = True
    logo_url: str | None = None

    @classmethod
    def from_domain(cls, c: Courier) -> CourierModel:
        return cls(id=c.id, code=c.code, name=c.name, is_active=c.is_active, logo_url=c.logo_url)

    def to_domain(self) -> Courier:
        return Courier(self.id, self.code, self.name, self.is_active, self.logo_url)


class ServiceModel(BaseModel):
    id: str
    courier_id: str
    code: str
    name: str
    is_active: bool = True

    @classmethod
    def from_domain(cls, s: CourierService) -> ServiceModel:
        return cls(id=s.id, courier_id=s.courier_id, code=s.code, name=s.name, is_active=s.is_active)

    def to_domain(self) -> CourierService:
        return CourierService(self.id, self.courier_id, self.code, self.name, self.is_active)


class QuoteModel(BaseModel):
    courier_code: str
    service_code: str
    service_name: str
    cost: Decimal
    etd: str | None = None

    @classmethod
    def from_domain(cls, q: Quote) -> QuoteModel:
        return cls(
            courier_code=q.courier_code,
            service_code=q.service_code,
            service_name=q.service_name,
            cost=q.cost,
            etd=q.etd,
        )

    def to_domain(self) -> Quote:
        return Quote(self.courier_code, self.service_code, self.service_name, self.cost, self.etd)


class FormSnapshot(BaseModel):
    """
    Everything needed to rebuild a checkout form after a reload.

    mode tells which kind of session wrote it; order_id/order_number/status
    are set for draft and existing sessions.
    """

    mode: Mode = "fresh"
    order_id: str | None = None
    order_number: str | None = None
    status: str | None = None

    phone: str = ""
    name: str = ""
    address: str = ""
    city_district_text: str = ""
    location: LocationModel | None = None

    carrier: CourierModel | None = None
    service: ServiceModel | None = None
    quote: QuoteModel | None = None
    quoted_cost: Decimal = Decimal(0)
    manual_fee: Decimal = Decimal(0)

    discount_kind: Literal["percentage", "nominal"] = "nominal"
    discount_value: Decimal = Decimal(0)
    partial_payment: Decimal = Decimal(0)
    payment_method_id: str | None = None
    notes: str | None = None

    lines: list[LineModel] = Field(default_factory=list)

    def cart_lines(self) -> tuple[CartLine, ...]:
        return tuple(m.to_domain() for m in self.lines)


class PendingEdit(BaseModel):
    """One-shot instruction: open this order for editing on next load."""

    order_id: str


__all__ = (
    "Mode",
    "CourierModel",
    "ServiceModel",
    "QuoteModel",
    "FormSnapshot",
    "PendingEdit",
)
