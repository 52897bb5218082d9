"""Accumulation (swing) tracker linking a SELL exit to an optional BUY re-entry."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.types import utc_now
from ..errors import InvalidStateError, NotFoundError
from ..models import AccumulationTrade, SwingStatus, Transaction, TransactionType
from .events import enqueue_ledger_event
from .ledger import get_transaction
from .locks import guarded_write

logger = logging.getLogger(__name__)

_LINKED_STATUSES = (SwingStatus.OPEN, SwingStatus.CLOSED)


async def get_swing(session: AsyncSession, holder_id: str, trade_id: UUID) -> AccumulationTrade:
    trade = await session.get(AccumulationTrade, trade_id)
    if trade is None or trade.holder_id != holder_id:
        raise NotFoundError("AccumulationTrade", trade_id)
    return trade


async def list_swings(
    session: AsyncSession,
    holder_id: str,
    *,
    status: SwingStatus | None = None,
    asset_id: UUID | None = None,
) -> list[AccumulationTrade]:
    stmt = select(AccumulationTrade).where(AccumulationTrade.holder_id == holder_id)
    if status is not None:
        stmt = stmt.where(AccumulationTrade.status == status)
    if asset_id is not None:
        stmt = stmt.where(AccumulationTrade.asset_id == asset_id)
    result = await session.execute(stmt.order_by(AccumulationTrade.created_at.desc()))
    return list(result.scalars().all())


async def _linked_trade(session: AsyncSession, holder_id: str, column, transaction_id: UUID) -> AccumulationTrade | None:
    stmt = select(AccumulationTrade).where(
        AccumulationTrade.holder_id == holder_id,
        column == transaction_id,
        AccumulationTrade.status.in_(_LINKED_STATUSES),
    )
    return (await session.execute(stmt)).scalars().first()


async def open_swing(
    session: AsyncSession, holder_id: str, exit_transaction_id: UUID, notes: str | None = None
) -> AccumulationTrade:
    """Mark a SELL as the exit leg of a swing trade."""

    exit_tx = await get_transaction(session, holder_id, exit_transaction_id)
    if exit_tx.transaction_type is not TransactionType.SELL:
        raise InvalidStateError(
            f"Transaction {exit_tx.id} is a {exit_tx.transaction_type.value}; a swing must start from a SELL",
            transaction_id=exit_tx.id,
        )

    async with guarded_write(session, holder_id, exit_tx.asset_id):
        linked = await _linked_trade(session, holder_id, AccumulationTrade.exit_transaction_id, exit_tx.id)
        if linked is not None:
            raise InvalidStateError(
                f"SELL {exit_tx.id} already starts swing {linked.id}",
                transaction_id=exit_tx.id,
                trade_id=linked.id,
            )
        trade = AccumulationTrade(
            holder_id=holder_id,
            exit_transaction_id=exit_tx.id,
            asset_id=exit_tx.asset_id,
            old_coin_amount=exit_tx.gross_amount,
            exit_price_usd=exit_tx.unit_price_usd,
            status=SwingStatus.OPEN,
            notes=notes.strip() if notes else None,
        )
        session.add(trade)
        await session.flush()
        await enqueue_ledger_event(
            session,
            holder_id,
            "ledger.swing.opened",
            {"trade_id": trade.id, "exit_transaction_id": exit_tx.id, "old_coin_amount": trade.old_coin_amount},
        )
    logger.info("Opened swing %s from SELL %s (%s coins)", trade.id, exit_tx.id, trade.old_coin_amount)
    return trade


def _require_open(trade: AccumulationTrade) -> None:
    if trade.status is not SwingStatus.OPEN:
        raise InvalidStateError(
            f"Swing {trade.id} is {trade.status.value}; only OPEN swings can change",
            trade_id=trade.id,
            status=trade.status,
        )


def _validate_reentry(trade: AccumulationTrade, exit_tx: Transaction, reentry: Transaction) -> None:
    if reentry.transaction_type is not TransactionType.BUY:
        raise InvalidStateError(
            f"Transaction {reentry.id} is a {reentry.transaction_type.value}; re-entry must be a BUY",
            transaction_id=reentry.id,
        )
    if reentry.asset_id != trade.asset_id:
        raise InvalidStateError(
            f"BUY {reentry.id} is for a different asset than swing {trade.id}",
            transaction_id=reentry.id,
        )
    if reentry.transaction_date < exit_tx.transaction_date:
        raise InvalidStateError(
            f"BUY {reentry.id} predates the exit SELL {exit_tx.id}",
            transaction_id=reentry.id,
        )


async def close_swing(
    session: AsyncSession, holder_id: str, trade_id: UUID, reentry_transaction_id: UUID
) -> AccumulationTrade:
    """Link a BUY as re-entry and fix the accumulation delta."""

    trade = await get_swing(session, holder_id, trade_id)
    _require_open(trade)
    exit_tx = await get_transaction(session, holder_id, trade.exit_transaction_id)
    reentry = await get_transaction(session, holder_id, reentry_transaction_id)
    _validate_reentry(trade, exit_tx, reentry)

    async with guarded_write(session, holder_id, trade.asset_id):
        await session.refresh(trade)
        _require_open(trade)
        linked = await _linked_trade(session, holder_id, AccumulationTrade.reentry_transaction_id, reentry.id)
        if linked is not None:
            raise InvalidStateError(
                f"BUY {reentry.id} is already the re-entry of swing {linked.id}",
                transaction_id=reentry.id,
                trade_id=linked.id,
            )
        trade.reentry_transaction_id = reentry.id
        trade.new_coin_amount = reentry.net_amount
        trade.reentry_price_usd = reentry.unit_price_usd
        trade.status = SwingStatus.CLOSED
        trade.closed_at = utc_now()
        await session.flush()
        await enqueue_ledger_event(
            session,
            holder_id,
            "ledger.swing.closed",
            {
                "trade_id": trade.id,
                "reentry_transaction_id": reentry.id,
                "accumulation_delta": trade.accumulation_delta,
            },
        )
    logger.info("Closed swing %s with BUY %s (delta %s)", trade.id, reentry.id, trade.accumulation_delta)
    return trade


async def cancel_swing(session: AsyncSession, holder_id: str, trade_id: UUID) -> AccumulationTrade:
    trade = await get_swing(session, holder_id, trade_id)
    _require_open(trade)
    async with guarded_write(session, holder_id, trade.asset_id):
        await session.refresh(trade)
        _require_open(trade)
        trade.status = SwingStatus.CANCELLED
        await session.flush()
        await enqueue_ledger_event(session, holder_id, "ledger.swing.cancelled", {"trade_id": trade.id})
    logger.info("Cancelled swing %s", trade.id)
    return trade


__all__ = ["get_swing", "list_swings", "open_swing", "close_swing", "cancel_swing"]
