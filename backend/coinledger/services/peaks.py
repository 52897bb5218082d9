"""Peak tracker: highest observed price since an asset's most recent BUY."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.types import ensure_utc, utc_now
from ..errors import NotFoundError
from ..models import PricePeak, Transaction
from ..money import quantize_storage, require_positive, to_decimal
from .events import enqueue_ledger_event
from .locks import guarded_write
from .reference import get_asset

logger = logging.getLogger(__name__)


async def get_peak(session: AsyncSession, holder_id: str, asset_id: UUID) -> PricePeak | None:
    stmt = select(PricePeak).where(PricePeak.holder_id == holder_id, PricePeak.asset_id == asset_id)
    return (await session.execute(stmt)).scalars().first()


async def reset_peak(session: AsyncSession, holder_id: str, buy: Transaction) -> PricePeak:
    """Re-anchor the peak at ``buy``'s unit price.

    Must run inside the caller's unit of work so the BUY and the reset commit together.
    """

    peak = await get_peak(session, holder_id, buy.asset_id)
    previous = peak.peak_price if peak is not None else None
    if peak is None:
        peak = PricePeak(holder_id=holder_id, asset_id=buy.asset_id)
        session.add(peak)
    peak.peak_price = buy.unit_price_usd
    peak.peak_timestamp = buy.transaction_date
    peak.transaction_id = buy.id
    peak.is_active = True
    await session.flush()
    await enqueue_ledger_event(
        session,
        holder_id,
        "ledger.peak.reset",
        {
            "asset_id": buy.asset_id,
            "transaction_id": buy.id,
            "peak_price": peak.peak_price,
            "previous_peak_price": previous,
        },
    )
    logger.info("Peak for asset %s reset to %s by BUY %s", buy.asset_id, peak.peak_price, buy.id)
    return peak


async def observe_price(
    session: AsyncSession,
    holder_id: str,
    asset_id: UUID,
    price: Decimal | str,
    observed_at: datetime | None = None,
) -> PricePeak | None:
    """Raise the peak to ``price`` when it is strictly higher; no-op until a BUY anchors a peak."""

    value = require_positive(to_decimal(price, field="price"), "price")
    timestamp = ensure_utc(observed_at) if observed_at is not None else utc_now()
    asset = await get_asset(session, asset_id)

    async with guarded_write(session, holder_id, asset.id):
        peak = await get_peak(session, holder_id, asset.id)
        if peak is None or not peak.is_active:
            logger.debug("Ignoring price %s for %s: no active peak", value, asset.symbol)
            return peak
        if value > peak.peak_price:
            previous = peak.peak_price
            peak.peak_price = quantize_storage(value)
            peak.peak_timestamp = timestamp
            await session.flush()
            await enqueue_ledger_event(
                session,
                holder_id,
                "ledger.peak.advanced",
                {"asset_id": asset.id, "peak_price": peak.peak_price, "previous_peak_price": previous},
            )
            logger.info("Peak for %s advanced from %s to %s", asset.symbol, previous, peak.peak_price)
    return peak


async def deactivate_peak(session: AsyncSession, holder_id: str, asset_id: UUID) -> PricePeak:
    """Administrative removal of an asset from peak tracking."""

    async with guarded_write(session, holder_id, asset_id):
        peak = await get_peak(session, holder_id, asset_id)
        if peak is None:
            raise NotFoundError("PricePeak", asset_id)
        peak.is_active = False
        await session.flush()
    logger.info("Peak tracking deactivated for asset %s", asset_id)
    return peak


__all__ = ["get_peak", "reset_peak", "observe_price", "deactivate_peak"]
