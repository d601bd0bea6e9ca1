"""
JSON codecs for denormalized snapshots.

Order rows keep line items, shipping and location as JSON; the overlay
snapshot reuses the same models. Decimals travel as strings.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, TypeAdapter

from sellerdesk._types import CartLine
from sellerdesk.backend._types import ResolvedLocation, ShippingSnapshot


class LineModel(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int
    unit_price: Decimal
    note: str | None = None
    name: str = ""
    image: str | None = None
    variant_name: str | None = None

    @classmethod
    def from_domain(cls, line: CartLine) -> LineModel:
        return cls(
            product_id=line.product_id,
            variant_id=line.variant_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            note=line.note,
            name=line.name,
            image=line.image,
            variant_name=line.variant_name,
        )

    def to_domain(self) -> CartLine:
        return CartLine(
            product_id=self.product_id,
            variant_id=self.variant_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
            note=self.note,
            name=self.name,
            image=self.image,
            variant_name=self.variant_name,
        )


class LocationModel(BaseModel):
    province_id: str
    province_name: str
    city_id: str
    city_name: str
    district_id: str
    district_name: str

    @classmethod
    def from_domain(cls, loc: ResolvedLocation) -> LocationModel:
        return cls(
            province_id=loc.province_id,
            province_name=loc.province_name,
            city_id=loc.city_id,
            city_name=loc.city_name,
            district_id=loc.district_id,
            district_name=loc.district_name,
        )

    def to_domain(self) -> ResolvedLocation:
        return ResolvedLocation(
            province_id=self.province_id,
            province_name=self.province_name,
            city_id=self.city_id,
            city_name=self.city_name,
            district_id=self.district_id,
            district_name=self.district_name,
        )


class ShippingModel(BaseModel):
    courier_id: str | None = None
    courier_code: str | None = None
    courier_name: str | None = None
    service_id: str | None = None
    service_code: str | None = None
    service_name: str | None = None
    quoted_cost: Decimal = Decimal(0)
    manual_fee: Decimal = Decimal(0)

    @classmethod
    def from_domain(cls, snap: ShippingSnapshot) -> ShippingModel:
        return cls(
            courier_id=snap.courier_id,
            courier_code=snap.courier_code,
            courier_name=snap.courier_name,
            service_id=snap.service_id,
            service_code=snap.service_code,
            service_name=snap.service_name,
            quoted_cost=snap.quoted_cost,
            manual_fee=snap.manual_fee,
        )

    def to_domain(self) -> ShippingSnapshot:
        return ShippingSnapshot(
            courier_id=self.courier_id,
            courier_code=self.courier_code,
            courier_name=self.courier_name,
            service_id=self.service_id,
            service_code=self.service_code,
            service_name=self.service_name,
            quoted_cost=self.quoted_cost,
            manual_fee=self.manual_fee,
        )


_LINES = TypeAdapter(list[LineModel])


def dump_lines(lines: tuple[CartLine, ...]) -> str:
    return _LINES.dump_json([LineModel.from_domain(line) for line in lines]).decode()


def load_lines(raw: str | None) -> tuple[CartLine, ...]:
    if not raw:
        return ()
    return tuple(m.to_domain() for m in _LINES.validate_json(raw))


def dump_location(loc: ResolvedLocation | None) -> str | None:
    return LocationModel.from_domain(loc).model_dump_json() if loc else None


def load_location(raw: str | None) -> ResolvedLocation | None:
    return LocationModel.model_validate_json(raw).to_domain() if raw else None


__all__ = (
    "LineModel",
    "LocationModel",
    "ShippingModel",
    "dump_lines",
    "load_lines",
    "dump_location",
    "load_location",
)
