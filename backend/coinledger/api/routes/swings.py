"""Accumulation (swing trade) endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import SwingStatus
from ...schemas import SwingCloseRequest, SwingOpenRequest, SwingSchema
from ...services import accumulation as swing_service
from ..dependencies import InternalAuth, RequestContext, get_db_session, get_request_context

router = APIRouter(dependencies=[InternalAuth])


@router.get("", response_model=list[SwingSchema])
async def get_swings(
    status: SwingStatus | None = None,
    asset_id: UUID | None = None,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> list[SwingSchema]:
    trades = await swing_service.list_swings(session, context.holder_id, status=status, asset_id=asset_id)
    return [SwingSchema.model_validate(trade) for trade in trades]


@router.post("", response_model=SwingSchema, status_code=status.HTTP_201_CREATED)
async def post_swing(
    payload: SwingOpenRequest,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> SwingSchema:
    trade = await swing_service.open_swing(session, context.holder_id, payload.exit_transaction_id, payload.notes)
    return SwingSchema.model_validate(trade)


@router.post("/{trade_id}/close", response_model=SwingSchema)
async def post_close(
    trade_id: UUID,
    payload: SwingCloseRequest,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> SwingSchema:
    trade = await swing_service.close_swing(session, context.holder_id, trade_id, payload.reentry_transaction_id)
    return SwingSchema.model_validate(trade)


@router.post("/{trade_id}/cancel", response_model=SwingSchema)
async def post_cancel(
    trade_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> SwingSchema:
    trade = await swing_service.cancel_swing(session, context.holder_id, trade_id)
    return SwingSchema.model_validate(trade)


__all__ = ["router"]
