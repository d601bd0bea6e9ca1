"""
Memory backend — seedable in-process data store for tests and demos.
"""

from __future__ import annotations

import asyncio
import itertools
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from kungfu import Result, Ok, Error

from sellerdesk._errors import CheckoutError, Errors
from sellerdesk._types import (
    CartLine,
    CourierId,
    LineKey,
    OrderId,
    PaymentMethodId,
    SellerId,
    ServiceId,
    merge_line,
)
from sellerdesk.backend._protocol import format_order_number
from sellerdesk.backend._types import (
    OrderRecord,
    OrderStatus,
    OrderWrite,
    PaymentMethod,
    ResolvedLocation,
    SellerProfile,
)
from sellerdesk.shipping._types import Courier, CourierService


@dataclass
class MemoryBackend:
    """
    In-memory backend.

    Note: Single process only. fail_writes makes every order/cart
    write return WRITE_FAILURE, for exercising rejection paths.

    Example:
        backend = MemoryBackend()
        backend.add_courier(Courier("c-jne", "jne", "JNE"))
        backend.add_payment_method(PaymentMethod("pm-1", "seller-1", "BCA", "123", "Toko A"))
    """

    order_prefix: str = "ORD"
    clock: Callable[[], datetime] = datetime.now
    fail_writes: bool = False

    _carts: dict[SellerId, tuple[CartLine, ...]] = field(default_factory=dict)
    _orders: dict[OrderId, OrderRecord] = field(default_factory=dict)
    _touched: dict[OrderId, int] = field(default_factory=dict)
    _couriers: dict[CourierId, Courier] = field(default_factory=dict)
    _services: dict[ServiceId, CourierService] = field(default_factory=dict)
    _courier_prefs: dict[tuple[SellerId, CourierId], bool] = field(default_factory=dict)
    _service_prefs: dict[tuple[SellerId, ServiceId], bool] = field(default_factory=dict)
    _payment_methods: dict[PaymentMethodId, PaymentMethod] = field(default_factory=dict)
    _sellers: dict[SellerId, SellerProfile] = field(default_factory=dict)
    _regions: dict[str, ResolvedLocation] = field(default_factory=dict)
    _sequence: itertools.count[int] = field(default_factory=lambda: itertools.count(1))
    _writes: itertools.count[int] = field(default_factory=itertools.count)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    # ── seeding ───────────────────────────────────────────────────────────────

    def add_courier(self, courier: Courier, *services: CourierService) -> None:
        self._couriers[courier.id] = courier
        for service in services:
            self._services[service.id] = service

    def add_payment_method(self, method: PaymentMethod) -> None:
        self._payment_methods[method.id] = method

    def add_seller(self, profile: SellerProfile) -> None:
        self._sellers[profile.seller_id] = profile

    def add_region(self, region: ResolvedLocation) -> None:
        self._regions[region.district_id] = region

    # ── cart ──────────────────────────────────────────────────────────────────

    async def list_cart(self, seller_id: SellerId) -> Result[tuple[CartLine, ...], CheckoutError]:
        return Ok(tuple(self._carts.get(seller_id, ())))

    async def add_cart_line(self, seller_id: SellerId, line: CartLine) -> Result[None, CheckoutError]:
        if self.fail_writes:
            return Error(Errors.write_failed("add to cart"))
        async with self._lock:
            self._carts[seller_id] = merge_line(self._carts.get(seller_id, ()), line)
        return Ok(None)

    async def set_cart_quantity(
        self, seller_id: SellerId, key: LineKey, quantity: int
    ) -> Result[None, CheckoutError]:
        if self.fail_writes:
            return Error(Errors.write_failed("update cart"))
        async with self._lock:
            lines = self._carts.get(seller_id, ())
            self._carts[seller_id] = tuple(
                line if line.key != key else line.with_quantity(quantity)
                for line in lines
                if line.key != key or quantity > 0
            )
        return Ok(None)

    async def clear_cart(self, seller_id: SellerId) -> Result[None, CheckoutError]:
        if self.fail_writes:
            return Error(Errors.write_failed("clear cart"))
        async with self._lock:
            self._carts.pop(seller_id, None)
        return Ok(None)

    # ── orders ────────────────────────────────────────────────────────────────

    async def get_order(self, order_id: OrderId) -> Result[OrderRecord | None, CheckoutError]:
        return Ok(self._orders.get(order_id))

    async def find_orders(
        self,
        seller_id: SellerId,
        *,
        status: OrderStatus | None = None,
        phone: str | None = None,
    ) -> Result[tuple[OrderRecord, ...], CheckoutError]:
        found = [
            o for o in self._orders.values()
            if o.seller_id == seller_id
            and (status is None or o.status is status)
            and (phone is None or o.data.buyer.phone == phone)
        ]
        found.sort(key=lambda o: self._touched[o.id], reverse=True)
        return Ok(tuple(found))

    async def insert_order(self, write: OrderWrite) -> Result[OrderRecord, CheckoutError]:
        if self.fail_writes:
            return Error(Errors.write_failed("create order"))
        async with self._lock:
            now = self.clock()
            record = OrderRecord(
                id=str(uuid.uuid4()),
                order_number=format_order_number(self.order_prefix, now.date(), next(self._sequence)),
                created_at=now,
                updated_at=now,
                data=write,
            )
            self._orders[record.id] = record
            self._touched[record.id] = next(self._writes)
        return Ok(record)

    async def update_order(self, order_id: OrderId, write: OrderWrite) -> Result[OrderRecord, CheckoutError]:
        if self.fail_writes:
            return Error(Errors.write_failed("update order"))
        async with self._lock:
            existing = self._orders.get(order_id)
            if existing is None:
                return Error(Errors.write_failed(f"update order {order_id} (not found)"))
            record = OrderRecord(
                id=existing.id,
                order_number=existing.order_number,
                created_at=existing.created_at,
                updated_at=self.clock(),
                data=write,
            )
            self._orders[order_id] = record
            self._touched[order_id] = next(self._writes)
        return Ok(record)

    # ── carriers ──────────────────────────────────────────────────────────────

    async def list_couriers(self) -> Result[tuple[Courier, ...], CheckoutError]:
        return Ok(tuple(sorted(self._couriers.values(), key=lambda c: c.name)))

    async def list_services(self, courier_id: CourierId) -> Result[tuple[CourierService, ...], CheckoutError]:
        return Ok(tuple(s for s in self._services.values() if s.courier_id == courier_id))

    async def courier_preferences(self, seller_id: SellerId) -> Result[Mapping[CourierId, bool], CheckoutError]:
        return Ok({cid: flag for (owner, cid), flag in self._courier_prefs.items() if owner == seller_id})

    async def service_preferences(self, seller_id: SellerId) -> Result[Mapping[ServiceId, bool], CheckoutError]:
        return Ok({sid: flag for (owner, sid), flag in self._service_prefs.items() if owner == seller_id})

    async def set_courier_preference(
        self, seller_id: SellerId, courier_id: CourierId, enabled: bool
    ) -> Result[None, CheckoutError]:
        self._courier_prefs[(seller_id, courier_id)] = enabled
        return Ok(None)

    async def set_service_preference(
        self, seller_id: SellerId, service_id: ServiceId, enabled: bool
    ) -> Result[None, CheckoutError]:
        self._service_prefs[(seller_id, service_id)] = enabled
        return Ok(None)

    # ── payment / seller / regions ───────────────────────────────────────────

    async def list_payment_methods(self, seller_id: SellerId) -> Result[tuple[PaymentMethod, ...], CheckoutError]:
        return Ok(tuple(
            m for m in self._payment_methods.values()
            if m.seller_id == seller_id and m.is_active
        ))

    async def get_payment_method(
        self, method_id: PaymentMethodId
    ) -> Result[PaymentMethod | None, CheckoutError]:
        return Ok(self._payment_methods.get(method_id))

    async def get_seller(self, seller_id: SellerId) -> Result[SellerProfile | None, CheckoutError]:
        return Ok(self._sellers.get(seller_id))

    async def search_regions(self, text: str, limit: int = 10) -> Result[tuple[ResolvedLocation, ...], CheckoutError]:
        needle = text.strip().casefold()
        if not needle:
            return Ok(())
        hits = [
            r for r in self._regions.values()
            if needle in r.district_name.casefold() or needle in r.city_name.casefold()
        ]
        return Ok(tuple(hits[:limit]))

    async def get_region(self, district_id: str) -> Result[ResolvedLocation | None, CheckoutError]:
        return Ok(self._regions.get(district_id))


__all__ = ("MemoryBackend",)
