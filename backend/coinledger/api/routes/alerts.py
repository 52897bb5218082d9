"""Alert ledger endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import AlertStatus
from ...schemas import AlertSchema
from ...services import alerts as alert_service
from ..dependencies import InternalAuth, RequestContext, get_db_session, get_request_context

router = APIRouter(dependencies=[InternalAuth])


@router.get("", response_model=list[AlertSchema])
async def get_alerts(
    status: AlertStatus | None = Query(default=AlertStatus.PENDING),
    all_statuses: bool = Query(default=False, alias="all"),
    asset_id: UUID | None = None,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> list[AlertSchema]:
    alerts = await alert_service.list_alerts(
        session,
        context.holder_id,
        status=None if all_statuses else status,
        asset_id=asset_id,
    )
    return [AlertSchema.model_validate(alert) for alert in alerts]


@router.post("/{alert_id}/acknowledge", response_model=AlertSchema)
async def post_acknowledge(
    alert_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> AlertSchema:
    return AlertSchema.model_validate(await alert_service.acknowledge_alert(session, context.holder_id, alert_id))


@router.post("/{alert_id}/execute", response_model=AlertSchema)
async def post_execute(
    alert_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> AlertSchema:
    return AlertSchema.model_validate(await alert_service.execute_alert(session, context.holder_id, alert_id))


@router.post("/{alert_id}/dismiss", response_model=AlertSchema)
async def post_dismiss(
    alert_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> AlertSchema:
    return AlertSchema.model_validate(await alert_service.dismiss_alert(session, context.holder_id, alert_id))


__all__ = ["router"]
