"""Asset and exchange reference data endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...schemas import AssetCreateRequest, AssetSchema, ExchangeCreateRequest, ExchangeSchema
from ...services import reference as reference_service
from ..dependencies import InternalAuth, get_db_session

router = APIRouter(dependencies=[InternalAuth])


@router.get("/assets", response_model=list[AssetSchema])
async def get_assets(session: AsyncSession = Depends(get_db_session)) -> list[AssetSchema]:
    assets = await reference_service.list_assets(session)
    return [AssetSchema.model_validate(asset) for asset in assets]


@router.post("/assets", response_model=AssetSchema, status_code=status.HTTP_201_CREATED)
async def post_asset(payload: AssetCreateRequest, session: AsyncSession = Depends(get_db_session)) -> AssetSchema:
    asset = await reference_service.create_asset(session, payload.symbol, payload.name)
    return AssetSchema.model_validate(asset)


@router.get("/exchanges", response_model=list[ExchangeSchema])
async def get_exchanges(session: AsyncSession = Depends(get_db_session)) -> list[ExchangeSchema]:
    exchanges = await reference_service.list_exchanges(session)
    return [ExchangeSchema.model_validate(exchange) for exchange in exchanges]


@router.post("/exchanges", response_model=ExchangeSchema, status_code=status.HTTP_201_CREATED)
async def post_exchange(
    payload: ExchangeCreateRequest, session: AsyncSession = Depends(get_db_session)
) -> ExchangeSchema:
    exchange = await reference_service.create_exchange(session, payload.name)
    return ExchangeSchema.model_validate(exchange)


__all__ = ["router"]
