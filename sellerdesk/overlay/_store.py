"""
Key-value store — per-seller persisted state.

KeyValueStore — get/set/delete of opaque string payloads by {seller, purpose}.
All methods return Result for explicit error handling.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from kungfu import Result, Ok

from sellerdesk._types import SellerId


# ═══════════════════════════════════════════════════════════════════════════════
# Keys
# ═══════════════════════════════════════════════════════════════════════════════


class Purpose(Enum):
    """
    What a stored payload is for.

    CART_FORM: buyer/shipping/payment fields of the fresh cart.
    EDIT_SESSION: full snapshot while a draft or order is being edited.
    PENDING_EDIT: one-shot "open this order for editing" instruction.
    """

    CART_FORM = "cart_form"
    EDIT_SESSION = "edit_session"
    PENDING_EDIT = "pending_edit"


@dataclass(frozen=True, slots=True)
class StateKey:
    seller_id: SellerId
    purpose: Purpose


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Store Protocol — Result-based
# ═══════════════════════════════════════════════════════════════════════════════


class KeyValueStore(Protocol):
    """
    Persisted local state.

    Note: set is always a full replace. There is no partial update.
    """

    async def get(self, key: StateKey) -> Result[str | None, StoreError]:
        """Returns Ok(None) if not found."""
        ...

    async def set(self, key: StateKey, payload: str) -> Result[None, StoreError]: ...

    async def delete(self, key: StateKey) -> Result[bool, StoreError]:
        """Returns Ok(True) if existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Function-based Store Builder
# ═══════════════════════════════════════════════════════════════════════════════

type GetFn = Callable[[StateKey], Awaitable[Result[str | None, StoreError]]]
type SetFn = Callable[[StateKey, str], Awaitable[Result[None, StoreError]]]
type DeleteFn = Callable[[StateKey], Awaitable[Result[bool, StoreError]]]


@dataclass(frozen=True)
class FunctionalStore:
    """
    Store built from functions.

    Example:
        store = store_from(
            get=lambda key: redis_get(f"{key.seller_id}:{key.purpose.value}"),
            set=lambda key, payload: redis_set(f"{key.seller_id}:{key.purpose.value}", payload),
            delete=lambda key: redis_del(f"{key.seller_id}:{key.purpose.value}"),
        )
    """

    _get: GetFn
    _set: SetFn
    _delete: DeleteFn

    async def get(self, key: StateKey) -> Result[str | None, StoreError]:
        return await self._get(key)

    async def set(self, key: StateKey, payload: str) -> Result[None, StoreError]:
        return await self._set(key, payload)

    async def delete(self, key: StateKey) -> Result[bool, StoreError]:
        return await self._delete(key)


def store_from(get: GetFn, set: SetFn, delete: DeleteFn) -> FunctionalStore:
    """Create KeyValueStore from functions."""
    return FunctionalStore(_get=get, _set=set, _delete=delete)


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryStore:
    """
    In-memory key-value store.

    Note: Single process only; nothing survives a restart.
    """

    def __init__(self) -> None:
        self._data: dict[StateKey, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: StateKey) -> Result[str | None, StoreError]:
        async with self._lock:
            return Ok(self._data.get(key))

    async def set(self, key: StateKey, payload: str) -> Result[None, StoreError]:
        async with self._lock:
            self._data[key] = payload
            return Ok(None)

    async def delete(self, key: StateKey) -> Result[bool, StoreError]:
        async with self._lock:
            return Ok(self._data.pop(key, None) is not None)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Purpose",
    "StateKey",
    "StoreError",
    "KeyValueStore",
    "FunctionalStore",
    "store_from",
    "MemoryStore",
)
