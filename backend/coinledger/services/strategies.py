"""Strategy store: at most one active sell and one active buy strategy per asset."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.types import utc_now
from ..errors import NotFoundError
from ..models import BuyStrategy, SellStrategy, StrategyKind
from ..money import quantize_storage, require_positive, to_decimal
from .events import enqueue_ledger_event
from .locks import guarded_write
from .reference import get_asset

logger = logging.getLogger(__name__)

Strategy = Union[SellStrategy, BuyStrategy]

_MODELS: dict[StrategyKind, type[SellStrategy] | type[BuyStrategy]] = {
    StrategyKind.SELL: SellStrategy,
    StrategyKind.BUY: BuyStrategy,
}


async def get_active_strategy(
    session: AsyncSession, holder_id: str, asset_id: UUID, kind: StrategyKind
) -> Strategy | None:
    model = _MODELS[kind]
    stmt = select(model).where(
        model.holder_id == holder_id,
        model.asset_id == asset_id,
        model.is_active.is_(True),
    )
    return (await session.execute(stmt)).scalars().first()


async def _replace(session: AsyncSession, holder_id: str, replacement: Strategy) -> Strategy:
    existing = await get_active_strategy(session, holder_id, replacement.asset_id, replacement.kind)
    if existing is not None:
        existing.is_active = False
        existing.deactivated_at = utc_now()
        # The retired row must be written before the new active row to respect the partial unique index.
        await session.flush()
    session.add(replacement)
    await session.flush()
    await enqueue_ledger_event(
        session,
        holder_id,
        "ledger.strategy.updated",
        {
            "strategy_id": replacement.id,
            "kind": replacement.kind,
            "asset_id": replacement.asset_id,
            "threshold_percent": replacement.threshold_percent,
            "replaced_strategy_id": existing.id if existing is not None else None,
        },
    )
    return replacement


async def set_sell_strategy(
    session: AsyncSession, holder_id: str, asset_id: UUID, threshold_percent: Decimal | str
) -> SellStrategy:
    threshold = require_positive(to_decimal(threshold_percent, field="threshold_percent"), "threshold_percent")
    asset = await get_asset(session, asset_id)
    async with guarded_write(session, holder_id, asset.id):
        strategy = SellStrategy(
            holder_id=holder_id,
            asset_id=asset.id,
            threshold_percent=quantize_storage(threshold),
            is_active=True,
        )
        await _replace(session, holder_id, strategy)
    logger.info("Sell strategy for %s set to +%s%%", asset.symbol, strategy.threshold_percent)
    return strategy


async def set_buy_strategy(
    session: AsyncSession,
    holder_id: str,
    asset_id: UUID,
    dip_percent: Decimal | str,
    buy_amount_usd: Decimal | str,
) -> BuyStrategy:
    dip = require_positive(to_decimal(dip_percent, field="dip_percent"), "dip_percent")
    amount = require_positive(to_decimal(buy_amount_usd, field="buy_amount_usd"), "buy_amount_usd")
    asset = await get_asset(session, asset_id)
    async with guarded_write(session, holder_id, asset.id):
        strategy = BuyStrategy(
            holder_id=holder_id,
            asset_id=asset.id,
            threshold_percent=quantize_storage(dip),
            buy_amount_usd=quantize_storage(amount),
            is_active=True,
        )
        await _replace(session, holder_id, strategy)
    logger.info(
        "Buy strategy for %s set to -%s%% for $%s", asset.symbol, strategy.threshold_percent, strategy.buy_amount_usd
    )
    return strategy


async def deactivate_strategy(
    session: AsyncSession, holder_id: str, asset_id: UUID, kind: StrategyKind
) -> Strategy:
    """Soft-disable the active strategy, keeping the row as history."""

    async with guarded_write(session, holder_id, asset_id):
        strategy = await get_active_strategy(session, holder_id, asset_id, kind)
        if strategy is None:
            raise NotFoundError(f"Active {kind.value} strategy for asset", asset_id)
        strategy.is_active = False
        strategy.deactivated_at = utc_now()
        await session.flush()
        await enqueue_ledger_event(
            session,
            holder_id,
            "ledger.strategy.deactivated",
            {"strategy_id": strategy.id, "kind": kind, "asset_id": asset_id},
        )
    logger.info("%s strategy %s deactivated", kind.value, strategy.id)
    return strategy


async def list_strategies(
    session: AsyncSession,
    holder_id: str,
    kind: StrategyKind,
    *,
    asset_id: UUID | None = None,
    include_inactive: bool = False,
) -> list[Strategy]:
    model = _MODELS[kind]
    stmt = select(model).where(model.holder_id == holder_id)
    if asset_id is not None:
        stmt = stmt.where(model.asset_id == asset_id)
    if not include_inactive:
        stmt = stmt.where(model.is_active.is_(True))
    result = await session.execute(stmt.order_by(model.created_at.desc()))
    return list(result.scalars().all())


__all__ = [
    "Strategy",
    "get_active_strategy",
    "set_sell_strategy",
    "set_buy_strategy",
    "deactivate_strategy",
    "list_strategies",
]
