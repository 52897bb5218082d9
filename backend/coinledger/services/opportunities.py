"""Opportunity evaluator.

``evaluate_sell`` and ``evaluate_buy`` are pure functions of current state plus
a supplied price; they keep no memory of earlier evaluations. Repeat firings
are collapsed by the alert ledger, not here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import BuyStrategy, PricePeak, SellStrategy, StrategyKind
from ..money import ZERO, require_positive, to_decimal
from .alerts import AlertOutcome, raise_alert
from .peaks import get_peak
from .positions import Position, get_position
from .reference import get_asset
from .strategies import get_active_strategy
from .thresholds import buy_target_price, sell_target_price

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class Opportunity:
    asset_id: UUID
    strategy_type: StrategyKind
    trigger_price: Decimal
    threshold_percent: Decimal
    reference_price: Decimal
    target_price: Decimal


def evaluate_sell(
    position: Position, strategy: SellStrategy | None, current_price: Decimal
) -> Opportunity | None:
    if strategy is None or not strategy.is_active:
        return None
    # Nothing held means nothing to sell, whatever the historical average.
    if position.current_balance <= ZERO or position.avg_buy_price <= ZERO:
        return None
    target = sell_target_price(position.avg_buy_price, strategy.threshold_percent)
    if current_price < target:
        return None
    return Opportunity(
        asset_id=strategy.asset_id,
        strategy_type=StrategyKind.SELL,
        trigger_price=current_price,
        threshold_percent=strategy.threshold_percent,
        reference_price=position.avg_buy_price,
        target_price=target,
    )


def evaluate_buy(
    peak: PricePeak | None, strategy: BuyStrategy | None, current_price: Decimal
) -> Opportunity | None:
    if strategy is None or not strategy.is_active:
        return None
    if peak is None or not peak.is_active:
        return None
    target = buy_target_price(peak.peak_price, strategy.threshold_percent)
    if current_price > target:
        return None
    return Opportunity(
        asset_id=strategy.asset_id,
        strategy_type=StrategyKind.BUY,
        trigger_price=current_price,
        threshold_percent=strategy.threshold_percent,
        reference_price=peak.peak_price,
        target_price=target,
    )


async def check_sell_opportunity(
    session: AsyncSession, holder_id: str, asset_id: UUID, current_price: Decimal | str
) -> Opportunity | None:
    price = require_positive(to_decimal(current_price, field="current_price"), "current_price")
    asset = await get_asset(session, asset_id)
    strategy = await get_active_strategy(session, holder_id, asset.id, StrategyKind.SELL)
    if strategy is None:
        return None
    position = await get_position(session, holder_id, asset.id)
    return evaluate_sell(position, strategy, price)


async def check_buy_opportunity(
    session: AsyncSession, holder_id: str, asset_id: UUID, current_price: Decimal | str
) -> Opportunity | None:
    price = require_positive(to_decimal(current_price, field="current_price"), "current_price")
    asset = await get_asset(session, asset_id)
    strategy = await get_active_strategy(session, holder_id, asset.id, StrategyKind.BUY)
    if strategy is None:
        return None
    peak = await get_peak(session, holder_id, asset.id)
    return evaluate_buy(peak, strategy, price)


async def scan_opportunities(
    session: AsyncSession, holder_id: str, asset_id: UUID, current_price: Decimal | str
) -> list[AlertOutcome]:
    """Run both checks and hand every fired opportunity to the alert ledger."""

    with tracer.start_as_current_span("coinledger.scan_opportunities") as span:
        span.set_attribute("coinledger.asset_id", str(asset_id))
        opportunities = [
            await check_sell_opportunity(session, holder_id, asset_id, current_price),
            await check_buy_opportunity(session, holder_id, asset_id, current_price),
        ]
        outcomes: list[AlertOutcome] = []
        for opportunity in opportunities:
            if opportunity is None:
                continue
            outcomes.append(
                await raise_alert(
                    session,
                    holder_id,
                    opportunity.asset_id,
                    opportunity.strategy_type,
                    opportunity.trigger_price,
                    opportunity.threshold_percent,
                    opportunity.reference_price,
                )
            )
        span.set_attribute("coinledger.alerts_created", sum(1 for outcome in outcomes if outcome.created))
    logger.debug("Scan of asset %s at %s fired %d opportunities", asset_id, current_price, len(outcomes))
    return outcomes


__all__ = [
    "Opportunity",
    "evaluate_sell",
    "evaluate_buy",
    "check_sell_opportunity",
    "check_buy_opportunity",
    "scan_opportunities",
]
