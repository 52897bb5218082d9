"""Caller-supplied daily price bars and latest-close lookups."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import unit_of_work
from ..errors import ValidationError
from ..models import DailyPrice
from ..money import quantize_storage, require_positive, to_decimal
from .reference import get_asset

logger = logging.getLogger(__name__)


async def record_daily_price(
    session: AsyncSession,
    asset_id: UUID,
    day_date: date,
    *,
    high_price: Decimal | str,
    low_price: Decimal | str,
    closing_price: Decimal | str,
) -> DailyPrice:
    """Insert or replace the bar for ``(asset_id, day_date)``."""

    high = require_positive(to_decimal(high_price, field="high_price"), "high_price")
    low = require_positive(to_decimal(low_price, field="low_price"), "low_price")
    close = require_positive(to_decimal(closing_price, field="closing_price"), "closing_price")
    if not low <= close <= high:
        raise ValidationError(
            "Daily bar must satisfy low <= close <= high",
            field="closing_price",
            value={"high": str(high), "low": str(low), "close": str(close)},
        )
    asset = await get_asset(session, asset_id)

    async with unit_of_work(session):
        stmt = select(DailyPrice).where(DailyPrice.asset_id == asset.id, DailyPrice.day_date == day_date)
        bar = (await session.execute(stmt)).scalars().first()
        if bar is None:
            bar = DailyPrice(asset_id=asset.id, day_date=day_date)
            session.add(bar)
        bar.high_price = quantize_storage(high)
        bar.low_price = quantize_storage(low)
        bar.closing_price = quantize_storage(close)
        await session.flush()
    logger.info("Stored daily bar for %s on %s (close %s)", asset.symbol, day_date, close)
    return bar


async def list_daily_prices(
    session: AsyncSession,
    asset_id: UUID,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[DailyPrice]:
    stmt = select(DailyPrice).where(DailyPrice.asset_id == asset_id)
    if start_date is not None:
        stmt = stmt.where(DailyPrice.day_date >= start_date)
    if end_date is not None:
        stmt = stmt.where(DailyPrice.day_date <= end_date)
    result = await session.execute(stmt.order_by(DailyPrice.day_date))
    return list(result.scalars().all())


async def latest_close(session: AsyncSession, asset_id: UUID) -> Decimal | None:
    closes = await latest_closes(session, [asset_id])
    return closes.get(asset_id)


async def latest_closes(session: AsyncSession, asset_ids: Iterable[UUID]) -> dict[UUID, Decimal]:
    wanted = set(asset_ids)
    if not wanted:
        return {}
    stmt = (
        select(DailyPrice)
        .where(DailyPrice.asset_id.in_(wanted))
        .order_by(DailyPrice.asset_id, DailyPrice.day_date.desc())
    )
    closes: dict[UUID, Decimal] = {}
    for bar in (await session.execute(stmt)).scalars():
        closes.setdefault(bar.asset_id, bar.closing_price)
    return closes


__all__ = ["record_daily_price", "list_daily_prices", "latest_close", "latest_closes"]
