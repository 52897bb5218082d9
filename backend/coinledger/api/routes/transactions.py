"""Transaction ledger endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import Transaction, TransactionType
from ...schemas import BuyRequest, SellRequest, TransactionSchema
from ...services import ledger as ledger_service
from ..dependencies import InternalAuth, RequestContext, get_db_session, get_request_context

router = APIRouter(dependencies=[InternalAuth])


def serialize_transaction(tx: Transaction) -> TransactionSchema:
    return TransactionSchema(
        id=tx.id,
        asset_id=tx.asset_id,
        asset_symbol=tx.asset.symbol,
        exchange_id=tx.exchange_id,
        exchange_name=tx.exchange.name,
        transaction_type=tx.transaction_type,
        gross_amount=tx.gross_amount,
        fee_amount=tx.fee_amount,
        fee_currency=tx.fee_currency,
        net_amount=tx.net_amount,
        unit_price_usd=tx.unit_price_usd,
        total_spent_usd=tx.total_spent_usd,
        realized_pnl=tx.realized_pnl,
        transaction_date=tx.transaction_date,
    )


@router.get("", response_model=list[TransactionSchema])
async def get_transactions(
    asset_id: UUID | None = None,
    transaction_type: TransactionType | None = Query(default=None, alias="type"),
    limit: int = Query(default=ledger_service.DEFAULT_PAGE_SIZE, ge=1, le=ledger_service.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> list[TransactionSchema]:
    rows = await ledger_service.list_transactions(
        session,
        context.holder_id,
        asset_id=asset_id,
        transaction_type=transaction_type,
        limit=limit,
        offset=offset,
    )
    return [serialize_transaction(tx) for tx in rows]


@router.get("/{transaction_id}", response_model=TransactionSchema)
async def get_transaction(
    transaction_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> TransactionSchema:
    tx = await ledger_service.get_transaction(session, context.holder_id, transaction_id)
    return serialize_transaction(tx)


@router.post("/buy", response_model=TransactionSchema, status_code=status.HTTP_201_CREATED)
async def post_buy(
    payload: BuyRequest,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> TransactionSchema:
    tx = await ledger_service.record_buy(
        session,
        context.holder_id,
        asset_id=payload.asset_id,
        exchange_id=payload.exchange_id,
        gross_amount=payload.gross_amount,
        unit_price=payload.unit_price,
        fee_amount=payload.fee_amount,
        fee_currency=payload.fee_currency,
        fee_usd_add_on=payload.fee_usd_add_on,
        transaction_date=payload.transaction_date,
    )
    return serialize_transaction(tx)


@router.post("/sell", response_model=TransactionSchema, status_code=status.HTTP_201_CREATED)
async def post_sell(
    payload: SellRequest,
    session: AsyncSession = Depends(get_db_session),
    context: RequestContext = Depends(get_request_context),
) -> TransactionSchema:
    tx = await ledger_service.record_sell(
        session,
        context.holder_id,
        asset_id=payload.asset_id,
        exchange_id=payload.exchange_id,
        gross_amount=payload.gross_amount,
        unit_price=payload.unit_price,
        fee_amount=payload.fee_amount,
        fee_currency=payload.fee_currency,
        transaction_date=payload.transaction_date,
    )
    return serialize_transaction(tx)


__all__ = ["router", "serialize_transaction"]
