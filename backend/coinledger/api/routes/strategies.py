"""Sell and buy-the-dip strategy endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import StrategyKind
from ...schemas import BuyStrategyRequest, SellStrategyRequest, StrategySchema
from ...services import strategies as strategy_service
from ..dependencies import InternalAuth, RequestContext, get_db_session, get_request_context

router = APIRouter(dependencies=[InternalAuth])


@router.get("", response_model=list[StrategySchema])
async def get_strategies(
    asset_id: UUID | None = None,
    kind: StrategyKind | None = None,
    include_inactive: bool = False,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> list[StrategySchema]:
    kinds = [kind] if kind is not None else [StrategyKind.SELL, StrategyKind.BUY]
    strategies: list[StrategySchema] = []
    for item in kinds:
        rows = await strategy_service.list_strategies(
            session, context.holder_id, item, asset_id=asset_id, include_inactive=include_inactive
        )
        strategies.extend(StrategySchema.model_validate(row) for row in rows)
    return strategies


@router.put("/{asset_id}/sell", response_model=StrategySchema)
async def put_sell_strategy(
    asset_id: UUID,
    payload: SellStrategyRequest,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> StrategySchema:
    strategy = await strategy_service.set_sell_strategy(
        session, context.holder_id, asset_id, payload.threshold_percent
    )
    return StrategySchema.model_validate(strategy)


@router.put("/{asset_id}/buy", response_model=StrategySchema)
async def put_buy_strategy(
    asset_id: UUID,
    payload: BuyStrategyRequest,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> StrategySchema:
    strategy = await strategy_service.set_buy_strategy(
        session, context.holder_id, asset_id, payload.dip_percent, payload.buy_amount_usd
    )
    return StrategySchema.model_validate(strategy)


@router.delete("/{asset_id}/{kind}", response_model=StrategySchema)
async def delete_strategy(
    asset_id: UUID,
    kind: StrategyKind,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> StrategySchema:
    strategy = await strategy_service.deactivate_strategy(session, context.holder_id, asset_id, kind)
    return StrategySchema.model_validate(strategy)


__all__ = ["router"]
