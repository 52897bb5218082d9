"""Transaction ledger: append-only BUY/SELL records with fee and PnL arithmetic."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..db.types import ensure_utc, utc_now
from ..errors import InsufficientBalanceError, NotFoundError, ValidationError
from ..models import Asset, Exchange, Transaction, TransactionType
from ..money import (
    ZERO,
    money_context,
    quantize_storage,
    require_non_negative,
    require_positive,
    require_storable,
    to_decimal,
)
from .events import enqueue_ledger_event
from .locks import guarded_write
from .peaks import reset_peak
from .positions import get_position
from .reference import get_asset, get_exchange

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000


@dataclass(frozen=True)
class TradeAmounts:
    """Full-precision amounts for one trade, before rounding to storage scale.

    ``fee_cost_usd`` includes ``fee_usd_add_on`` on a BUY; SELLs have no add-on.
    """

    gross_amount: Decimal
    fee_amount: Decimal
    fee_currency: str
    fee_in_coin: bool
    net_amount: Decimal
    unit_price_usd: Decimal
    fee_cost_usd: Decimal
    total_usd: Decimal


def compute_buy_amounts(
    asset_symbol: str,
    gross_amount: Decimal | str,
    unit_price: Decimal | str,
    fee_amount: Decimal | str = ZERO,
    fee_currency: str | None = None,
    fee_usd_add_on: Decimal | str = ZERO,
    *,
    usd_code: str = "USD",
) -> TradeAmounts:
    """Net coins credited and total USD spent for a BUY.

    A coin-denominated fee is already paid for inside ``gross * price`` (the
    holder pays for gross and receives net), so only USD fees and the
    ``fee_usd_add_on`` surcharge are added on top.
    """

    base = _base_amounts(asset_symbol, gross_amount, unit_price, fee_amount, fee_currency, usd_code)
    add_on = require_non_negative(to_decimal(fee_usd_add_on, field="fee_usd_add_on"), "fee_usd_add_on")
    with money_context():
        total = base.gross_amount * base.unit_price_usd + add_on
        if not base.fee_in_coin:
            total += base.fee_amount
        fee_cost = base.fee_cost_usd + add_on
    require_storable(add_on, "fee_usd_add_on")
    require_storable(total, "total_spent_usd")
    require_storable(fee_cost, "fee_cost_usd")
    return TradeAmounts(
        gross_amount=base.gross_amount,
        fee_amount=base.fee_amount,
        fee_currency=base.fee_currency,
        fee_in_coin=base.fee_in_coin,
        net_amount=base.net_amount,
        unit_price_usd=base.unit_price_usd,
        fee_cost_usd=fee_cost,
        total_usd=total,
    )


def compute_sell_amounts(
    asset_symbol: str,
    gross_amount: Decimal | str,
    unit_price: Decimal | str,
    fee_amount: Decimal | str = ZERO,
    fee_currency: str | None = None,
    *,
    usd_code: str = "USD",
) -> TradeAmounts:
    """For a SELL ``total_usd`` is the USD received: ``gross * price`` less the fee cost."""

    base = _base_amounts(asset_symbol, gross_amount, unit_price, fee_amount, fee_currency, usd_code)
    with money_context():
        proceeds = base.gross_amount * base.unit_price_usd - base.fee_cost_usd
    require_storable(proceeds, "total_spent_usd")
    return TradeAmounts(
        gross_amount=base.gross_amount,
        fee_amount=base.fee_amount,
        fee_currency=base.fee_currency,
        fee_in_coin=base.fee_in_coin,
        net_amount=base.net_amount,
        unit_price_usd=base.unit_price_usd,
        fee_cost_usd=base.fee_cost_usd,
        total_usd=proceeds,
    )


def compute_realized_pnl(amounts: TradeAmounts, avg_buy_price: Decimal) -> Decimal:
    """``(price - avg) * gross - fee_cost_usd``.

    On a BUY ``fee_cost_usd`` also carries ``fee_usd_add_on``; a SELL has no add-on.
    """

    with money_context():
        return (amounts.unit_price_usd - avg_buy_price) * amounts.gross_amount - amounts.fee_cost_usd


def _base_amounts(
    asset_symbol: str,
    gross_amount: Decimal | str,
    unit_price: Decimal | str,
    fee_amount: Decimal | str,
    fee_currency: str | None,
    usd_code: str,
) -> TradeAmounts:
    gross = require_positive(to_decimal(gross_amount, field="gross_amount"), "gross_amount")
    price = require_positive(to_decimal(unit_price, field="unit_price"), "unit_price")
    fee = require_non_negative(to_decimal(fee_amount, field="fee_amount"), "fee_amount")

    symbol = asset_symbol.upper()
    usd = usd_code.upper()
    currency = (fee_currency or usd).strip().upper()
    if currency not in {symbol, usd}:
        raise ValidationError(
            f"Fee currency must be {symbol} or {usd}", field="fee_currency", value=fee_currency
        )
    fee_in_coin = currency == symbol
    if fee_in_coin and fee > gross:
        raise ValidationError("Coin fee cannot exceed the gross amount", field="fee_amount", value=fee)

    with money_context():
        net = gross - fee if fee_in_coin else gross
        fee_cost = fee * price if fee_in_coin else fee
    for field, value in (("gross_amount", gross), ("unit_price", price), ("fee_amount", fee), ("fee_cost_usd", fee_cost)):
        require_storable(value, field)
    return TradeAmounts(
        gross_amount=gross,
        fee_amount=fee,
        fee_currency=currency,
        fee_in_coin=fee_in_coin,
        net_amount=net,
        unit_price_usd=price,
        fee_cost_usd=fee_cost,
        total_usd=ZERO,
    )


def _build_row(
    holder_id: str,
    asset: Asset,
    exchange: Exchange,
    transaction_type: TransactionType,
    amounts: TradeAmounts,
    transaction_date: datetime,
    realized_pnl: Decimal | None = None,
) -> Transaction:
    return Transaction(
        holder_id=holder_id,
        asset_id=asset.id,
        exchange_id=exchange.id,
        asset=asset,
        exchange=exchange,
        transaction_type=transaction_type,
        gross_amount=quantize_storage(amounts.gross_amount),
        fee_amount=quantize_storage(amounts.fee_amount),
        fee_currency=amounts.fee_currency,
        net_amount=quantize_storage(amounts.net_amount),
        unit_price_usd=quantize_storage(amounts.unit_price_usd),
        total_spent_usd=quantize_storage(amounts.total_usd),
        realized_pnl=quantize_storage(realized_pnl) if realized_pnl is not None else None,
        transaction_date=transaction_date,
    )


async def record_buy(
    session: AsyncSession,
    holder_id: str,
    *,
    asset_id: UUID,
    exchange_id: UUID,
    gross_amount: Decimal | str,
    unit_price: Decimal | str,
    fee_amount: Decimal | str = ZERO,
    fee_currency: str | None = None,
    fee_usd_add_on: Decimal | str = ZERO,
    transaction_date: datetime | None = None,
) -> Transaction:
    """Persist a BUY and re-anchor the asset's peak at its unit price in one unit of work."""

    asset = await get_asset(session, asset_id)
    exchange = await get_exchange(session, exchange_id)
    amounts = compute_buy_amounts(
        asset.symbol,
        gross_amount,
        unit_price,
        fee_amount,
        fee_currency,
        fee_usd_add_on,
        usd_code=get_settings().usd_currency_code,
    )
    traded_at = ensure_utc(transaction_date) if transaction_date is not None else utc_now()

    async with guarded_write(session, holder_id, asset.id):
        tx = _build_row(holder_id, asset, exchange, TransactionType.BUY, amounts, traded_at)
        session.add(tx)
        await session.flush()
        await reset_peak(session, holder_id, tx)
        await enqueue_ledger_event(
            session,
            holder_id,
            "ledger.transaction.recorded",
            {"transaction_id": tx.id, "asset_id": asset.id, "type": tx.transaction_type},
        )
    logger.info(
        "Recorded BUY %s: %s %s @ %s on %s",
        tx.id,
        tx.net_amount,
        asset.symbol,
        tx.unit_price_usd,
        exchange.name,
    )
    return tx


async def record_sell(
    session: AsyncSession,
    holder_id: str,
    *,
    asset_id: UUID,
    exchange_id: UUID,
    gross_amount: Decimal | str,
    unit_price: Decimal | str,
    fee_amount: Decimal | str = ZERO,
    fee_currency: str | None = None,
    transaction_date: datetime | None = None,
) -> Transaction:
    """Persist a SELL after checking the balance; realized PnL is fixed at this point."""

    asset = await get_asset(session, asset_id)
    exchange = await get_exchange(session, exchange_id)
    amounts = compute_sell_amounts(
        asset.symbol,
        gross_amount,
        unit_price,
        fee_amount,
        fee_currency,
        usd_code=get_settings().usd_currency_code,
    )
    traded_at = ensure_utc(transaction_date) if transaction_date is not None else utc_now()

    async with guarded_write(session, holder_id, asset.id):
        position = await get_position(session, holder_id, asset.id)
        if amounts.gross_amount > position.current_balance:
            logger.warning(
                "Rejected SELL of %s %s: balance is %s",
                amounts.gross_amount,
                asset.symbol,
                position.current_balance,
            )
            raise InsufficientBalanceError(asset.id, amounts.gross_amount, position.current_balance)
        pnl = compute_realized_pnl(amounts, position.avg_buy_price)
        require_storable(pnl, "realized_pnl")
        tx = _build_row(holder_id, asset, exchange, TransactionType.SELL, amounts, traded_at, pnl)
        session.add(tx)
        await session.flush()
        await enqueue_ledger_event(
            session,
            holder_id,
            "ledger.transaction.recorded",
            {
                "transaction_id": tx.id,
                "asset_id": asset.id,
                "type": tx.transaction_type,
                "realized_pnl": tx.realized_pnl,
            },
        )
    logger.info(
        "Recorded SELL %s: %s %s @ %s on %s (realized %s)",
        tx.id,
        tx.gross_amount,
        asset.symbol,
        tx.unit_price_usd,
        exchange.name,
        tx.realized_pnl,
    )
    return tx


async def get_transaction(session: AsyncSession, holder_id: str, transaction_id: UUID) -> Transaction:
    tx = await session.get(Transaction, transaction_id)
    if tx is None or tx.holder_id != holder_id:
        raise NotFoundError("Transaction", transaction_id)
    return tx


async def list_transactions(
    session: AsyncSession,
    holder_id: str,
    *,
    asset_id: UUID | None = None,
    transaction_type: TransactionType | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[Transaction]:
    if limit <= 0 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}", field="limit", value=limit)
    if offset < 0:
        raise ValidationError("offset must not be negative", field="offset", value=offset)
    stmt = select(Transaction).where(Transaction.holder_id == holder_id)
    if asset_id is not None:
        stmt = stmt.where(Transaction.asset_id == asset_id)
    if transaction_type is not None:
        stmt = stmt.where(Transaction.transaction_type == transaction_type)
    stmt = stmt.order_by(Transaction.transaction_date.desc(), Transaction.created_at.desc())
    result = await session.execute(stmt.limit(limit).offset(offset))
    return list(result.scalars().all())


__all__ = [
    "TradeAmounts",
    "compute_buy_amounts",
    "compute_sell_amounts",
    "compute_realized_pnl",
    "record_buy",
    "record_sell",
    "get_transaction",
    "list_transactions",
]
