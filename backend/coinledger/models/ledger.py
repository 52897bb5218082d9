"""Transaction ledger and price peak models."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.base import Base
from ..db.types import LedgerDecimal, UTCDateTime, utc_now
from .reference import Asset, Exchange


class TransactionType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


class Transaction(Base):
    """Immutable BUY/SELL record; corrections are new offsetting rows."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_holder_asset_date", "holder_id", "asset_id", "transaction_date"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    holder_id: Mapped[str] = mapped_column(String(64), index=True)
    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets.id"))
    exchange_id: Mapped[UUID] = mapped_column(ForeignKey("exchanges.id"))
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType, name="transaction_type"))
    gross_amount: Mapped[Decimal] = mapped_column(LedgerDecimal)
    fee_amount: Mapped[Decimal] = mapped_column(LedgerDecimal, default=Decimal("0"))
    fee_currency: Mapped[str] = mapped_column(String(10))
    net_amount: Mapped[Decimal] = mapped_column(LedgerDecimal)
    unit_price_usd: Mapped[Decimal] = mapped_column(LedgerDecimal)
    total_spent_usd: Mapped[Decimal] = mapped_column(LedgerDecimal)
    realized_pnl: Mapped[Decimal | None] = mapped_column(LedgerDecimal, nullable=True)
    transaction_date: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    asset: Mapped[Asset] = relationship(lazy="joined")
    exchange: Mapped[Exchange] = relationship(lazy="joined")


class PricePeak(Base):
    """Highest observed price for an asset since its most recent BUY."""

    __tablename__ = "price_peaks"
    __table_args__ = (UniqueConstraint("holder_id", "asset_id", name="uq_price_peak_holder_asset"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    holder_id: Mapped[str] = mapped_column(String(64))
    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets.id"))
    peak_price: Mapped[Decimal] = mapped_column(LedgerDecimal)
    peak_timestamp: Mapped[datetime] = mapped_column(UTCDateTime)
    transaction_id: Mapped[UUID] = mapped_column(ForeignKey("transactions.id"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now, onupdate=utc_now)


__all__ = ["TransactionType", "Transaction", "PricePeak"]
