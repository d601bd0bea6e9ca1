"""
Backend — the order-management data store.

    from sellerdesk import backend

    # Tests / demos
    store = backend.MemoryBackend()

    # Real database
    session_factory, engine = await backend.create_database(url)
    store = backend.SQLAlchemyBackend(session_factory)
"""

from sellerdesk.backend._types import (
    OrderStatus,
    ResolvedLocation,
    BuyerSnapshot,
    ShippingSnapshot,
    PartialPayment,
    OrderWrite,
    OrderRecord,
    PaymentMethod,
    SellerProfile,
)
from sellerdesk.backend._protocol import (
    Backend,
    format_order_number,
)
from sellerdesk.backend._codec import (
    LineModel,
    LocationModel,
    ShippingModel,
)
from sellerdesk.backend._memory import MemoryBackend
from sellerdesk.backend._sqlalchemy import (
    Base,
    LocalStateTable,
    SQLAlchemyBackend,
    create_database,
)


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
    "Backend",
    "format_order_number",
    "LineModel",
    "LocationModel",
    "ShippingModel",
    "MemoryBackend",
    "Base",
    "LocalStateTable",
    "SQLAlchemyBackend",
    "create_database",
)
