"""Per-(holder, asset) serialisation of read-validate-write sequences."""

from __future__ import annotations

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import unit_of_work

_locks: "weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock]" = weakref.WeakValueDictionary()


def _lock_for(holder_id: str, asset_id: UUID) -> asyncio.Lock:
    key = (holder_id, str(asset_id))
    lock = _locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _locks[key] = lock
    return lock


async def _advisory_lock(session: AsyncSession, holder_id: str, asset_id: UUID) -> None:
    # Serialises writers running in other processes; released at commit/rollback.
    if session.get_bind().dialect.name != "postgresql":
        return
    await session.execute(
        text("SELECT pg_advisory_xact_lock(hashtextextended(:key, 0))"),
        {"key": f"{holder_id}:{asset_id}"},
    )


@asynccontextmanager
async def guarded_write(session: AsyncSession, holder_id: str, asset_id: UUID) -> AsyncIterator[AsyncSession]:
    """Hold the holder/asset lock for the duration of one atomic unit of work."""

    lock = _lock_for(holder_id, asset_id)
    async with lock:
        async with unit_of_work(session):
            await _advisory_lock(session, holder_id, asset_id)
            yield session


__all__ = ["guarded_write"]
