"""Asset and exchange registry."""

from __future__ import annotations

import logging
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.session import unit_of_work
from ..errors import NotFoundError, ValidationError
from ..models import Asset, Exchange

logger = logging.getLogger(__name__)

MAX_SYMBOL_LENGTH = 10
MAX_NAME_LENGTH = 50


def normalize_symbol(symbol: str) -> str:
    normalized = (symbol or "").strip().upper()
    if not normalized:
        raise ValidationError("Symbol must not be empty", field="symbol", value=symbol)
    if len(normalized) > MAX_SYMBOL_LENGTH:
        raise ValidationError(
            f"Symbol must be at most {MAX_SYMBOL_LENGTH} characters", field="symbol", value=symbol
        )
    return normalized


def _normalize_name(name: str, field: str) -> str:
    normalized = (name or "").strip()
    if not normalized:
        raise ValidationError(f"{field} must not be empty", field=field, value=name)
    if len(normalized) > MAX_NAME_LENGTH:
        raise ValidationError(f"{field} must be at most {MAX_NAME_LENGTH} characters", field=field, value=name)
    return normalized


async def create_asset(session: AsyncSession, symbol: str, name: str) -> Asset:
    normalized = normalize_symbol(symbol)
    display_name = _normalize_name(name, "name")
    async with unit_of_work(session):
        existing = (await session.execute(select(Asset).where(Asset.symbol == normalized))).scalars().first()
        if existing is not None:
            raise ValidationError("An asset with this symbol already exists", field="symbol", value=normalized)
        asset = Asset(symbol=normalized, name=display_name)
        session.add(asset)
        await session.flush()
    logger.info("Registered asset %s (%s)", asset.symbol, asset.id)
    return asset


async def create_exchange(session: AsyncSession, name: str) -> Exchange:
    normalized = _normalize_name(name, "name")
    async with unit_of_work(session):
        existing_stmt = select(Exchange).where(sa.func.lower(Exchange.name) == normalized.lower())
        if (await session.execute(existing_stmt)).scalars().first() is not None:
            raise ValidationError("An exchange with this name already exists", field="name", value=normalized)
        exchange = Exchange(name=normalized)
        session.add(exchange)
        await session.flush()
    logger.info("Registered exchange %s (%s)", exchange.name, exchange.id)
    return exchange


async def get_asset(session: AsyncSession, asset_id: UUID) -> Asset:
    asset = await session.get(Asset, asset_id)
    if asset is None:
        raise NotFoundError("Asset", asset_id)
    return asset


async def get_asset_by_symbol(session: AsyncSession, symbol: str) -> Asset:
    normalized = normalize_symbol(symbol)
    asset = (await session.execute(select(Asset).where(Asset.symbol == normalized))).scalars().first()
    if asset is None:
        raise NotFoundError("Asset", normalized)
    return asset


async def get_exchange(session: AsyncSession, exchange_id: UUID) -> Exchange:
    exchange = await session.get(Exchange, exchange_id)
    if exchange is None:
        raise NotFoundError("Exchange", exchange_id)
    return exchange


async def list_assets(session: AsyncSession) -> list[Asset]:
    result = await session.execute(select(Asset).order_by(Asset.symbol))
    return list(result.scalars().all())


async def list_exchanges(session: AsyncSession) -> list[Exchange]:
    result = await session.execute(select(Exchange).order_by(Exchange.name))
    return list(result.scalars().all())


__all__ = [
    "normalize_symbol",
    "create_asset",
    "create_exchange",
    "get_asset",
    "get_asset_by_symbol",
    "get_exchange",
    "list_assets",
    "list_exchanges",
]
