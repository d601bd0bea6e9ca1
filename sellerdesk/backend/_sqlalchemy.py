"""
SQLAlchemy backend — async SQLAlchemy 2.0 implementation of Backend.

Usage:
    session_factory, engine = await create_database("sqlite+aiosqlite:///sellerdesk.db")
    backend = SQLAlchemyBackend(session_factory)

    match await backend.insert_order(write):
        case Ok(record):
            record.order_number   # "ORD-20240309-0001"
        case Error(err):
            err.kind              # ErrorKind.WRITE_FAILURE
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, ColumnElement, DateTime, Integer, Numeric, String, Text, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

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
)
from sellerdesk.backend._codec import (
    ShippingModel,
    dump_lines,
    dump_location,
    load_lines,
    load_location,
)
from sellerdesk.backend._protocol import format_order_number
from sellerdesk.backend._types import (
    BuyerSnapshot,
    OrderRecord,
    OrderStatus,
    OrderWrite,
    PartialPayment,
    PaymentMethod,
    ResolvedLocation,
    SellerProfile,
)
from sellerdesk.money._types import DiscountKind, DiscountSpec
from sellerdesk.shipping._types import Courier, CourierService


logger = logging.getLogger(__name__)

_MONEY = Numeric(16, 2, asdecimal=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class CartItemTable(Base):
    __tablename__ = "cart_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    variant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    variant_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

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


class OrderSequenceTable(Base):
    """One row per issued order number; the row id is the sequence."""

    __tablename__ = "order_sequence"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    issued_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class OrderTable(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    order_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    # Buyer
    customer_phone: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    customer_address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    customer_city_district: Mapped[str] = mapped_column(Text, nullable=False, default="")
    customer_location: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Snapshots
    items: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    shipping_info: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    discount_kind: Mapped[str] = mapped_column(String(16), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)

    # Money
    subtotal: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    shipping_fee: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    partial_payment_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    partial_payment_remaining: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)

    payment_method_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def apply(self, write: OrderWrite) -> None:
        self.seller_id = write.seller_id
        self.status = write.status.value
        self.customer_phone = write.buyer.phone
        self.customer_name = write.buyer.name
        self.customer_address = write.buyer.address
        self.customer_city_district = write.buyer.city_district_text
        self.customer_location = dump_location(write.buyer.location)
        self.items = dump_lines(write.items)
        self.shipping_info = ShippingModel.from_domain(write.shipping).model_dump_json()
        self.discount_kind = write.discount.kind.value
        self.discount_value = write.discount.value
        self.subtotal = write.subtotal
        self.discount_amount = write.discount_amount
        self.shipping_fee = write.shipping_fee
        self.total_amount = write.total_amount
        self.partial_payment_amount = write.partial_payment.amount
        self.partial_payment_remaining = write.partial_payment.remaining
        self.payment_method_id = write.payment_method_id
        self.notes = write.notes

    def to_domain(self) -> OrderRecord:
        return OrderRecord(
            id=self.id,
            order_number=self.order_number,
            created_at=self.created_at,
            updated_at=self.updated_at,
            data=OrderWrite(
                seller_id=self.seller_id,
                status=OrderStatus(self.status),
                buyer=BuyerSnapshot(
                    phone=self.customer_phone,
                    name=self.customer_name,
                    address=self.customer_address,
                    city_district_text=self.customer_city_district,
                    location=load_location(self.customer_location),
                ),
                items=load_lines(self.items),
                shipping=ShippingModel.model_validate_json(self.shipping_info).to_domain(),
                discount=DiscountSpec(DiscountKind(self.discount_kind), self.discount_value),
                subtotal=self.subtotal,
                discount_amount=self.discount_amount,
                shipping_fee=self.shipping_fee,
                total_amount=self.total_amount,
                partial_payment=PartialPayment(
                    amount=self.partial_payment_amount,
                    remaining=self.partial_payment_remaining,
                ),
                payment_method_id=self.payment_method_id,
                notes=self.notes,
            ),
        )


class CourierTable(Base):
    __tablename__ = "couriers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_domain(self) -> Courier:
        return Courier(self.id, self.code, self.name, self.is_active, self.logo_url)


class CourierServiceTable(Base):
    __tablename__ = "courier_services"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    courier_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> CourierService:
        return CourierService(self.id, self.courier_id, self.code, self.name, self.is_active)


class CourierPreferenceTable(Base):
    __tablename__ = "user_courier_preferences"

    seller_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    courier_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)


class ServicePreferenceTable(Base):
    __tablename__ = "user_service_preferences"

    seller_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    service_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False)


class PaymentMethodTable(Base):
    __tablename__ = "payment_methods"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    bank_name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_number: Mapped[str] = mapped_column(String(64), nullable=False)
    account_owner: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> PaymentMethod:
        return PaymentMethod(
            id=self.id,
            seller_id=self.seller_id,
            bank_name=self.bank_name,
            account_number=self.account_number,
            account_owner=self.account_owner,
            is_active=self.is_active,
        )


class SellerTable(Base):
    __tablename__ = "sellers"

    seller_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    shop_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    origin_district_id: Mapped[str | None] = mapped_column(String(32), nullable=True)

    def to_domain(self) -> SellerProfile:
        return SellerProfile(
            seller_id=self.seller_id,
            shop_name=self.shop_name,
            phone=self.phone,
            logo_url=self.logo_url,
            origin_district_id=self.origin_district_id,
        )


class RegionTable(Base):
    """Flattened district → city → province view."""

    __tablename__ = "regions_flat"

    district_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    district_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    city_id: Mapped[str] = mapped_column(String(32), nullable=False)
    city_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    province_id: Mapped[str] = mapped_column(String(32), nullable=False)
    province_name: Mapped[str] = mapped_column(String(255), nullable=False)

    def to_domain(self) -> ResolvedLocation:
        return ResolvedLocation(
            province_id=self.province_id,
            province_name=self.province_name,
            city_id=self.city_id,
            city_name=self.city_name,
            district_id=self.district_id,
            district_name=self.district_name,
        )


class LocalStateTable(Base):
    """Per-seller persisted UI state (cart form, edit session, pending edit)."""

    __tablename__ = "local_state"

    seller_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    purpose: Mapped[str] = mapped_column(String(32), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Backend
# ═══════════════════════════════════════════════════════════════════════════════


def _variant_is(variant_id: str | None) -> ColumnElement[bool]:
    if variant_id is None:
        return CartItemTable.variant_id.is_(None)
    return CartItemTable.variant_id == variant_id


class SQLAlchemyBackend:
    """
    Backend over any async SQLAlchemy engine.

    Note: Each method runs in its own session and commits once.
    Read errors → COLLABORATOR_UNAVAILABLE, write errors → WRITE_FAILURE.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        order_prefix: str = "ORD",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session_factory = session_factory
        self._order_prefix = order_prefix
        self._clock = clock

    # ── cart ──────────────────────────────────────────────────────────────────

    async def list_cart(self, seller_id: SellerId) -> Result[tuple[CartLine, ...], CheckoutError]:
        try:
            async with self._session_factory() as session:
                rows = await session.scalars(
                    select(CartItemTable)
                    .where(CartItemTable.seller_id == seller_id)
                    .order_by(CartItemTable.id)
                )
                return Ok(tuple(row.to_domain() for row in rows))
        except Exception as e:
            return Error(Errors.unavailable("cart", e))

    async def add_cart_line(self, seller_id: SellerId, line: CartLine) -> Result[None, CheckoutError]:
        try:
            async with self._session_factory() as session:
                existing = await session.scalar(
                    select(CartItemTable).where(
                        CartItemTable.seller_id == seller_id,
                        CartItemTable.product_id == line.product_id,
                        _variant_is(line.variant_id),
                    )
                )
                if existing is not None:
                    existing.quantity += line.quantity
                else:
                    session.add(CartItemTable(
                        seller_id=seller_id,
                        product_id=line.product_id,
                        variant_id=line.variant_id,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                        note=line.note,
                        name=line.name,
                        image=line.image,
                        variant_name=line.variant_name,
                    ))
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(Errors.write_failed("add to cart", e))

    async def set_cart_quantity(
        self, seller_id: SellerId, key: LineKey, quantity: int
    ) -> Result[None, CheckoutError]:
        product_id, variant_id = key
        try:
            async with self._session_factory() as session:
                row = await session.scalar(
                    select(CartItemTable).where(
                        CartItemTable.seller_id == seller_id,
                        CartItemTable.product_id == product_id,
                        _variant_is(variant_id),
                    )
                )
                if row is not None:
                    if quantity > 0:
                        row.quantity = quantity
                    else:
                        await session.delete(row)
                    await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(Errors.write_failed("update cart", e))

    async def clear_cart(self, seller_id: SellerId) -> Result[None, CheckoutError]:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(CartItemTable).where(CartItemTable.seller_id == seller_id))
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(Errors.write_failed("clear cart", e))

    # ── orders ────────────────────────────────────────────────────────────────

    async def get_order(self, order_id: OrderId) -> Result[OrderRecord | None, CheckoutError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                return Ok(row.to_domain() if row else None)
        except Exception as e:
            return Error(Errors.unavailable("orders", e))

    async def find_orders(
        self,
        seller_id: SellerId,
        *,
        status: OrderStatus | None = None,
        phone: str | None = None,
    ) -> Result[tuple[OrderRecord, ...], CheckoutError]:
        query = select(OrderTable).where(OrderTable.seller_id == seller_id)
        if status is not None:
            query = query.where(OrderTable.status == status.value)
        if phone is not None:
            query = query.where(OrderTable.customer_phone == phone)
        query = query.order_by(OrderTable.updated_at.desc(), OrderTable.order_number.desc())

        try:
            async with self._session_factory() as session:
                rows = await session.scalars(query)
                return Ok(tuple(row.to_domain() for row in rows))
        except Exception as e:
            return Error(Errors.unavailable("orders", e))

    async def insert_order(self, write: OrderWrite) -> Result[OrderRecord, CheckoutError]:
        now = self._clock()
        try:
            async with self._session_factory() as session:
                seq = OrderSequenceTable(issued_at=now)
                session.add(seq)
                await session.flush()

                row = OrderTable(
                    id=str(uuid.uuid4()),
                    order_number=format_order_number(self._order_prefix, now.date(), seq.id),
                    created_at=now,
                    updated_at=now,
                )
                row.apply(write)
                session.add(row)
                await session.commit()
                logger.debug("Inserted order %s (%s)", row.order_number, write.status.value)
                return Ok(row.to_domain())
        except Exception as e:
            return Error(Errors.write_failed("create order", e))

    async def update_order(self, order_id: OrderId, write: OrderWrite) -> Result[OrderRecord, CheckoutError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(OrderTable, order_id)
                if row is None:
                    return Error(Errors.write_failed(f"update order {order_id} (not found)"))
                row.apply(write)
                row.updated_at = self._clock()
                await session.commit()
                logger.debug("Updated order %s (%s)", row.order_number, write.status.value)
                return Ok(row.to_domain())
        except Exception as e:
            return Error(Errors.write_failed("update order", e))

    # ── carriers ──────────────────────────────────────────────────────────────

    async def list_couriers(self) -> Result[tuple[Courier, ...], CheckoutError]:
        try:
            async with self._session_factory() as session:
                rows = await session.scalars(select(CourierTable).order_by(CourierTable.name))
                return Ok(tuple(row.to_domain() for row in rows))
        except Exception as e:
            return Error(Errors.unavailable("couriers", e))

    async def list_services(self, courier_id: CourierId) -> Result[tuple[CourierService, ...], CheckoutError]:
        try:
            async with self._session_factory() as session:
                rows = await session.scalars(
                    select(CourierServiceTable)
                    .where(CourierServiceTable.courier_id == courier_id)
                    .order_by(CourierServiceTable.name)
                )
                return Ok(tuple(row.to_domain() for row in rows))
        except Exception as e:
            return Error(Errors.unavailable("courier services", e))

    async def courier_preferences(self, seller_id: SellerId) -> Result[Mapping[CourierId, bool], CheckoutError]:
        try:
            async with self._session_factory() as session:
                rows = await session.scalars(
                    select(CourierPreferenceTable).where(CourierPreferenceTable.seller_id == seller_id)
                )
                return Ok({row.courier_id: row.is_enabled for row in rows})
        except Exception as e:
            return Error(Errors.unavailable("courier preferences", e))

    async def service_preferences(self, seller_id: SellerId) -> Result[Mapping[ServiceId, bool], CheckoutError]:
        try:
            async with self._session_factory() as session:
                rows = await session.scalars(
                    select(ServicePreferenceTable).where(ServicePreferenceTable.seller_id == seller_id)
                )
                return Ok({row.service_id: row.is_enabled for row in rows})
        except Exception as e:
            return Error(Errors.unavailable("service preferences", e))

    async def set_courier_preference(
        self, seller_id: SellerId, courier_id: CourierId, enabled: bool
    ) -> Result[None, CheckoutError]:
        try:
            async with self._session_factory() as session:
                await session.merge(CourierPreferenceTable(
                    seller_id=seller_id, courier_id=courier_id, is_enabled=enabled,
                ))
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(Errors.write_failed("save courier preference", e))

    async def set_service_preference(
        self, seller_id: SellerId, service_id: ServiceId, enabled: bool
    ) -> Result[None, CheckoutError]:
        try:
            async with self._session_factory() as session:
                await session.merge(ServicePreferenceTable(
                    seller_id=seller_id, service_id=service_id, is_enabled=enabled,
                ))
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(Errors.write_failed("save service preference", e))

    # ── payment / seller / regions ───────────────────────────────────────────

    async def list_payment_methods(self, seller_id: SellerId) -> Result[tuple[PaymentMethod, ...], CheckoutError]:
        try:
            async with self._session_factory() as session:
                rows = await session.scalars(
                    select(PaymentMethodTable).where(
                        PaymentMethodTable.seller_id == seller_id,
                        PaymentMethodTable.is_active.is_(True),
                    )
                )
                return Ok(tuple(row.to_domain() for row in rows))
        except Exception as e:
            return Error(Errors.unavailable("payment methods", e))

    async def get_payment_method(
        self, method_id: PaymentMethodId
    ) -> Result[PaymentMethod | None, CheckoutError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(PaymentMethodTable, method_id)
                return Ok(row.to_domain() if row else None)
        except Exception as e:
            return Error(Errors.unavailable("payment methods", e))

    async def get_seller(self, seller_id: SellerId) -> Result[SellerProfile | None, CheckoutError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(SellerTable, seller_id)
                return Ok(row.to_domain() if row else None)
        except Exception as e:
            return Error(Errors.unavailable("seller profile", e))

    async def search_regions(self, text: str, limit: int = 10) -> Result[tuple[ResolvedLocation, ...], CheckoutError]:
        needle = text.strip()
        if not needle:
            return Ok(())
        pattern = f"%{needle}%"
        try:
            async with self._session_factory() as session:
                rows = await session.scalars(
                    select(RegionTable)
                    .where(or_(
                        RegionTable.district_name.ilike(pattern),
                        RegionTable.city_name.ilike(pattern),
                    ))
                    .order_by(RegionTable.district_name)
                    .limit(limit)
                )
                return Ok(tuple(row.to_domain() for row in rows))
        except Exception as e:
            return Error(Errors.unavailable("regions", e))

    async def get_region(self, district_id: str) -> Result[ResolvedLocation | None, CheckoutError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(RegionTable, district_id)
                return Ok(row.to_domain() if row else None)
        except Exception as e:
            return Error(Errors.unavailable("regions", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Database Setup
# ═══════════════════════════════════════════════════════════════════════════════


async def create_database(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create database and return (session_factory, engine)."""
    if ":memory:" in url:
        # One connection, or every session sees its own empty database.
        engine = create_async_engine(url, echo=False, poolclass=StaticPool)
    else:
        engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return async_sessionmaker(engine, expire_on_commit=False), engine


__all__ = (
    "Base",
    "CartItemTable",
    "OrderSequenceTable",
    "OrderTable",
    "CourierTable",
    "CourierServiceTable",
    "CourierPreferenceTable",
    "ServicePreferenceTable",
    "PaymentMethodTable",
    "SellerTable",
    "RegionTable",
    "LocalStateTable",
    "SQLAlchemyBackend",
    "create_database",
)
