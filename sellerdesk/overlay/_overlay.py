"""
Overlay store — edit-session snapshots, cart form and pending-edit instruction.

    overlay = OverlayStore(MemoryStore())

    await overlay.begin(seller_id, snapshot)
    await overlay.merge_added_line(seller_id, line)   # from another view
    await overlay.read(seller_id)
    await overlay.clear(seller_id)
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error
from pydantic import BaseModel, ValidationError

from sellerdesk._types import CartLine, OrderId, SellerId, merge_line
from sellerdesk.backend._codec import LineModel
from sellerdesk.overlay._snapshot import FormSnapshot, PendingEdit
from sellerdesk.overlay._store import KeyValueStore, Purpose, StateKey, StoreError


logger = logging.getLogger(__name__)


class OverlayStore:
    """
    Typed view over a KeyValueStore.

    Note: One active session per seller. Every write replaces the whole
    snapshot. A payload that no longer parses is treated as absent.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    # ── generic ───────────────────────────────────────────────────────────────

    async def _load[M: BaseModel](self, key: StateKey, model: type[M]) -> Result[M | None, StoreError]:
        match await self.store.get(key):
            case Error(err):
                return Error(err)
            case Ok(None):
                return Ok(None)
            case Ok(payload):
                try:
                    return Ok(model.model_validate_json(payload))
                except ValidationError:
                    logger.warning("Discarding unreadable %s state for %s", key.purpose.value, key.seller_id)
                    await self.store.delete(key)
                    return Ok(None)

    async def _save(self, key: StateKey, value: BaseModel) -> Result[None, StoreError]:
        return await self.store.set(key, value.model_dump_json())

    # ── edit session ──────────────────────────────────────────────────────────

    async def begin(self, seller_id: SellerId, snapshot: FormSnapshot) -> Result[None, StoreError]:
        """Start (or restart) an edit session with its initial snapshot."""
        logger.info(
            "Edit session started for %s (%s %s)",
            seller_id, snapshot.mode, snapshot.order_number or "-",
        )
        return await self.write(seller_id, snapshot)

    async def read(self, seller_id: SellerId) -> Result[FormSnapshot | None, StoreError]:
        return await self._load(StateKey(seller_id, Purpose.EDIT_SESSION), FormSnapshot)

    async def write(self, seller_id: SellerId, snapshot: FormSnapshot) -> Result[None, StoreError]:
        return await self._save(StateKey(seller_id, Purpose.EDIT_SESSION), snapshot)

    async def merge_added_line(self, seller_id: SellerId, line: CartLine) -> Result[bool, StoreError]:
        """
        Fold a line added elsewhere into the active session.

        Same (product, variant) → quantities add; otherwise appended.
        Ok(False) when no session is active (caller adds to the cart instead).
        """
        match await self.read(seller_id):
            case Error(err):
                return Error(err)
            case Ok(None):
                return Ok(False)
            case Ok(snapshot):
                merged = merge_line(snapshot.cart_lines(), line)
                updated = snapshot.model_copy(update={"lines": [LineModel.from_domain(m) for m in merged]})
                match await self.write(seller_id, updated):
                    case Error(err):
                        return Error(err)
                    case Ok(_):
                        return Ok(True)

    async def clear(self, seller_id: SellerId) -> Result[bool, StoreError]:
        return await self.store.delete(StateKey(seller_id, Purpose.EDIT_SESSION))

    # ── pending edit instruction ──────────────────────────────────────────────

    async def put_pending_edit(self, seller_id: SellerId, order_id: OrderId) -> Result[None, StoreError]:
        return await self._save(StateKey(seller_id, Purpose.PENDING_EDIT), PendingEdit(order_id=order_id))

    async def take_pending_edit(self, seller_id: SellerId) -> Result[OrderId | None, StoreError]:
        """Read and delete. A second call returns Ok(None)."""
        key = StateKey(seller_id, Purpose.PENDING_EDIT)
        match await self._load(key, PendingEdit):
            case Error(err):
                return Error(err)
            case Ok(None):
                return Ok(None)
            case Ok(pending):
                match await self.store.delete(key):
                    case Error(err):
                        return Error(err)
                    case Ok(_):
                        return Ok(pending.order_id)

    # ── fresh cart form ───────────────────────────────────────────────────────

    async def read_cart_form(self, seller_id: SellerId) -> Result[FormSnapshot | None, StoreError]:
        return await self._load(StateKey(seller_id, Purpose.CART_FORM), FormSnapshot)

    async def write_cart_form(self, seller_id: SellerId, snapshot: FormSnapshot) -> Result[None, StoreError]:
        return await self._save(StateKey(seller_id, Purpose.CART_FORM), snapshot)

    async def clear_cart_form(self, seller_id: SellerId) -> Result[bool, StoreError]:
        return await self.store.delete(StateKey(seller_id, Purpose.CART_FORM))


__all__ = ("OverlayStore",)
