"""Portfolio aggregation: fold the transaction ledger into per-asset holdings.

The fold itself is a pure function over transaction-like rows so it can be
reused by the sell path (balance check, average buy price) and by read-only
summaries alike.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Asset, Transaction, TransactionType
from ..money import ZERO, money_context
from .market import latest_closes


class LedgerRow(Protocol):
    transaction_type: TransactionType
    gross_amount: Decimal
    net_amount: Decimal
    total_spent_usd: Decimal
    realized_pnl: Decimal | None


@dataclass(frozen=True)
class Position:
    asset_id: UUID | None
    total_bought: Decimal
    total_sold: Decimal
    current_balance: Decimal
    total_invested_usd: Decimal
    avg_buy_price: Decimal
    realized_pnl_total: Decimal
    transaction_count: int = 0


@dataclass(frozen=True)
class Valuation:
    current_price: Decimal
    current_value: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal


@dataclass(frozen=True)
class ExchangePosition:
    exchange_id: UUID
    exchange_name: str
    position: Position


@dataclass(frozen=True)
class PositionSummary:
    asset_id: UUID
    symbol: str
    name: str
    position: Position
    valuation: Valuation | None = None
    exchanges: list[ExchangePosition] = field(default_factory=list)


def fold_position(transactions: Iterable[LedgerRow], asset_id: UUID | None = None) -> Position:
    """Fold BUY/SELL rows into balance, invested cost and average buy price."""

    bought = ZERO
    sold = ZERO
    invested = ZERO
    realized = ZERO
    count = 0
    with money_context():
        for tx in transactions:
            count += 1
            if tx.transaction_type is TransactionType.BUY:
                bought += tx.net_amount
                invested += tx.total_spent_usd
            else:
                sold += tx.gross_amount
                if tx.realized_pnl is not None:
                    realized += tx.realized_pnl
        # An asset never bought has no defined average price.
        avg_price = invested / bought if bought > ZERO else ZERO
        balance = bought - sold
        if not balance:
            balance = ZERO
    return Position(
        asset_id=asset_id,
        total_bought=bought,
        total_sold=sold,
        current_balance=balance,
        total_invested_usd=invested,
        avg_buy_price=avg_price,
        realized_pnl_total=realized,
        transaction_count=count,
    )


def value_position(position: Position, current_price: Decimal) -> Valuation:
    with money_context():
        current_value = position.current_balance * current_price
        unrealized = current_value - position.total_invested_usd
        total = unrealized + position.realized_pnl_total
    return Valuation(
        current_price=current_price,
        current_value=current_value,
        unrealized_pnl=unrealized,
        total_pnl=total,
    )


def summarize_positions(
    transactions: Iterable[Transaction],
    prices: Mapping[UUID, Decimal] | None = None,
) -> list[PositionSummary]:
    """Group rows per asset (and per exchange within an asset) and value them."""

    by_asset: dict[UUID, list[Transaction]] = defaultdict(list)
    assets: dict[UUID, Asset] = {}
    for tx in transactions:
        by_asset[tx.asset_id].append(tx)
        assets[tx.asset_id] = tx.asset

    prices = prices or {}
    summaries: list[PositionSummary] = []
    for asset_id, rows in by_asset.items():
        position = fold_position(rows, asset_id)
        by_exchange: dict[UUID, list[Transaction]] = defaultdict(list)
        exchange_names: dict[UUID, str] = {}
        for tx in rows:
            by_exchange[tx.exchange_id].append(tx)
            exchange_names[tx.exchange_id] = tx.exchange.name
        exchanges = [
            ExchangePosition(
                exchange_id=exchange_id,
                exchange_name=exchange_names[exchange_id],
                position=fold_position(exchange_rows, asset_id),
            )
            for exchange_id, exchange_rows in sorted(by_exchange.items(), key=lambda item: exchange_names[item[0]])
        ]
        price = prices.get(asset_id)
        asset = assets[asset_id]
        summaries.append(
            PositionSummary(
                asset_id=asset_id,
                symbol=asset.symbol,
                name=asset.name,
                position=position,
                valuation=value_position(position, price) if price is not None else None,
                exchanges=exchanges,
            )
        )
    return sorted(summaries, key=lambda summary: summary.symbol)


async def load_transactions(
    session: AsyncSession, holder_id: str, asset_id: UUID | None = None
) -> list[Transaction]:
    stmt = select(Transaction).where(Transaction.holder_id == holder_id)
    if asset_id is not None:
        stmt = stmt.where(Transaction.asset_id == asset_id)
    result = await session.execute(stmt.order_by(Transaction.transaction_date, Transaction.created_at))
    return list(result.scalars().all())


async def get_position(session: AsyncSession, holder_id: str, asset_id: UUID) -> Position:
    return fold_position(await load_transactions(session, holder_id, asset_id), asset_id)


async def portfolio_summary(
    session: AsyncSession,
    holder_id: str,
    prices: Mapping[UUID, Decimal] | None = None,
) -> list[PositionSummary]:
    """Per-asset holdings; assets without an explicit price fall back to the latest stored close."""

    transactions = await load_transactions(session, holder_id)
    resolved: dict[UUID, Decimal] = dict(prices or {})
    missing = {tx.asset_id for tx in transactions} - set(resolved)
    if missing:
        resolved.update(await latest_closes(session, missing))
    return summarize_positions(transactions, resolved)


__all__ = [
    "Position",
    "Valuation",
    "ExchangePosition",
    "PositionSummary",
    "fold_position",
    "value_position",
    "summarize_positions",
    "load_transactions",
    "get_position",
    "portfolio_summary",
]
