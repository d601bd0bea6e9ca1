"""
SQLAlchemy integration — key-value store over the local_state table.

Usage:
    session_factory, engine = await create_database(url)
    store = SQLAlchemyStore(session_factory)
    overlay = OverlayStore(store)
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from sellerdesk.backend._sqlalchemy import LocalStateTable
from sellerdesk.overlay._store import StateKey, StoreError


class SQLAlchemyStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def get(self, key: StateKey) -> Result[str | None, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(LocalStateTable, (key.seller_id, key.purpose.value))
                return Ok(row.payload if row else None)
        except Exception as e:
            return Error(StoreError("Failed to get", e))

    async def set(self, key: StateKey, payload: str) -> Result[None, StoreError]:
        try:
            async with self._session_factory() as session:
                await session.merge(LocalStateTable(
                    seller_id=key.seller_id,
                    purpose=key.purpose.value,
                    payload=payload,
                    updated_at=self._clock(),
                ))
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StoreError("Failed to set", e))

    async def delete(self, key: StateKey) -> Result[bool, StoreError]:
        try:
            async with self._session_factory() as session:
                row = await session.get(LocalStateTable, (key.seller_id, key.purpose.value))
                if row is None:
                    return Ok(False)
                await session.delete(row)
                await session.commit()
                return Ok(True)
        except Exception as e:
            return Error(StoreError("Failed to delete", e))


__all__ = ("SQLAlchemyStore",)
