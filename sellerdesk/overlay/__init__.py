"""
Overlay — locally persisted checkout state, keyed by seller.

    from sellerdesk import overlay as O

    store = O.OverlayStore(O.MemoryStore())
    await store.begin(seller_id, O.FormSnapshot(mode="existing", order_id=order.id))
    await store.merge_added_line(seller_id, line)
    await store.take_pending_edit(seller_id)   # one-shot
"""

from sellerdesk.overlay._store import (
    Purpose,
    StateKey,
    StoreError,
    KeyValueStore,
    FunctionalStore,
    store_from,
    MemoryStore,
)
from sellerdesk.overlay._snapshot import (
    Mode,
    CourierModel,
    ServiceModel,
    QuoteModel,
    FormSnapshot,
    PendingEdit,
)
from sellerdesk.overlay._overlay import OverlayStore
from sellerdesk.overlay._sqlalchemy import SQLAlchemyStore


__all__ = (
    "Purpose",
    "StateKey",
    "StoreError",
    "KeyValueStore",
    "FunctionalStore",
    "store_from",
    "MemoryStore",
    "Mode",
    "CourierModel",
    "ServiceModel",
    "QuoteModel",
    "FormSnapshot",
    "PendingEdit",
    "OverlayStore",
    "SQLAlchemyStore",
)
