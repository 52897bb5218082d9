"""Portfolio summary endpoints."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...errors import ValidationError
from ...money import require_positive, to_decimal
from ...schemas import PositionSchema, PositionSummarySchema, ValuationSchema
from ...services import market as market_service
from ...services import positions as positions_service
from ...services import reference as reference_service
from ..dependencies import InternalAuth, RequestContext, get_db_session, get_request_context

router = APIRouter(dependencies=[InternalAuth])


async def _parse_prices(session: AsyncSession, raw_prices: list[str]) -> dict[UUID, Decimal]:
    prices: dict[UUID, Decimal] = {}
    for item in raw_prices:
        symbol, sep, value = item.partition(":")
        if not sep:
            raise ValidationError("Prices must be given as SYMBOL:PRICE", field="price", value=item)
        asset = await reference_service.get_asset_by_symbol(session, symbol)
        prices[asset.id] = require_positive(to_decimal(value, field="price"), "price")
    return prices


@router.get("", response_model=list[PositionSummarySchema])
async def get_portfolio(
    price: list[str] = Query(default=[], description="Current prices as SYMBOL:PRICE"),
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> list[PositionSummarySchema]:
    prices = await _parse_prices(session, price)
    summaries = await positions_service.portfolio_summary(session, context.holder_id, prices)
    return [PositionSummarySchema.model_validate(summary) for summary in summaries]


@router.get("/{asset_id}", response_model=PositionSummarySchema)
async def get_asset_position(
    asset_id: UUID,
    price: Decimal | None = None,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> PositionSummarySchema:
    asset = await reference_service.get_asset(session, asset_id)
    position = await positions_service.get_position(session, context.holder_id, asset.id)
    current = price if price is not None else await market_service.latest_close(session, asset.id)
    valuation = None
    if current is not None:
        valuation = ValuationSchema.model_validate(
            positions_service.value_position(position, require_positive(current, "price"))
        )
    return PositionSummarySchema(
        asset_id=asset.id,
        symbol=asset.symbol,
        name=asset.name,
        position=PositionSchema.model_validate(position),
        valuation=valuation,
    )


__all__ = ["router"]
