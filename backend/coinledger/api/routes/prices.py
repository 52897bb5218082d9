"""Price observation, opportunity scans and daily bars."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...errors import NotFoundError
from ...schemas import (
    AlertSchema,
    DailyPriceRequest,
    DailyPriceSchema,
    PeakSchema,
    PriceObservationRequest,
    ScanResultSchema,
)
from ...services import market as market_service
from ...services import opportunities as opportunity_service
from ...services import peaks as peak_service
from ..dependencies import InternalAuth, RequestContext, get_db_session, get_request_context

router = APIRouter(dependencies=[InternalAuth])


@router.get("/{asset_id}/peak", response_model=PeakSchema)
async def get_peak(
    asset_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> PeakSchema:
    peak = await peak_service.get_peak(session, context.holder_id, asset_id)
    if peak is None:
        raise NotFoundError("PricePeak", asset_id)
    return PeakSchema.model_validate(peak)


@router.delete("/{asset_id}/peak", response_model=PeakSchema)
async def delete_peak(
    asset_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> PeakSchema:
    peak = await peak_service.deactivate_peak(session, context.holder_id, asset_id)
    return PeakSchema.model_validate(peak)


@router.post("/{asset_id}/observe", response_model=PeakSchema | None)
async def post_observation(
    asset_id: UUID,
    payload: PriceObservationRequest,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> PeakSchema | None:
    peak = await peak_service.observe_price(
        session, context.holder_id, asset_id, payload.price, payload.observed_at
    )
    return PeakSchema.model_validate(peak) if peak is not None else None


@router.post("/{asset_id}/scan", response_model=list[ScanResultSchema])
async def post_scan(
    asset_id: UUID,
    payload: PriceObservationRequest,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> list[ScanResultSchema]:
    outcomes = await opportunity_service.scan_opportunities(session, context.holder_id, asset_id, payload.price)
    return [
        ScanResultSchema(alert=AlertSchema.model_validate(outcome.alert), created=outcome.created)
        for outcome in outcomes
    ]


@router.get("/{asset_id}/daily", response_model=list[DailyPriceSchema])
async def get_daily_prices(
    asset_id: UUID,
    start_date: date | None = None,
    end_date: date | None = None,
    session: AsyncSession = Depends(get_db_session),
) -> list[DailyPriceSchema]:
    bars = await market_service.list_daily_prices(session, asset_id, start_date, end_date)
    return [DailyPriceSchema.model_validate(bar) for bar in bars]


@router.post("/{asset_id}/daily", response_model=DailyPriceSchema, status_code=status.HTTP_201_CREATED)
async def post_daily_price(
    asset_id: UUID,
    payload: DailyPriceRequest,
    session: AsyncSession = Depends(get_db_session),
) -> DailyPriceSchema:
    bar = await market_service.record_daily_price(
        session,
        asset_id,
        payload.day_date,
        high_price=payload.high_price,
        low_price=payload.low_price,
        closing_price=payload.closing_price,
    )
    return DailyPriceSchema.model_validate(bar)


__all__ = ["router"]
