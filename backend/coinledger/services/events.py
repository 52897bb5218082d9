"""Domain event outbox writer."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ..models import LedgerEvent


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


async def enqueue_ledger_event(
    session: AsyncSession, holder_id: str, event_type: str, payload: dict[str, Any]
) -> LedgerEvent:
    event = LedgerEvent(holder_id=holder_id, event_type=event_type, payload=_jsonable(payload), status="pending")
    session.add(event)
    await session.flush()
    return event


__all__ = ["enqueue_ledger_event"]
