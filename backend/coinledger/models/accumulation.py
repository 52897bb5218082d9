"""Swing trades: a SELL exit optionally followed by a BUY re-entry."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..db.base import Base
from ..db.types import LedgerDecimal, UTCDateTime, utc_now
from ..money import money_context


class SwingStatus(str, enum.Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"


class AccumulationTrade(Base):
    __tablename__ = "accumulation_trades"
    __table_args__ = (
        Index("ix_accumulation_trades_status", "status"),
        Index("ix_accumulation_trades_asset", "asset_id"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    holder_id: Mapped[str] = mapped_column(String(64), index=True)
    exit_transaction_id: Mapped[UUID] = mapped_column(ForeignKey("transactions.id"))
    reentry_transaction_id: Mapped[UUID | None] = mapped_column(ForeignKey("transactions.id"), nullable=True)
    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets.id"))
    old_coin_amount: Mapped[Decimal] = mapped_column(LedgerDecimal)
    new_coin_amount: Mapped[Decimal | None] = mapped_column(LedgerDecimal, nullable=True)
    status: Mapped[SwingStatus] = mapped_column(Enum(SwingStatus, name="swing_status"), default=SwingStatus.OPEN)
    exit_price_usd: Mapped[Decimal] = mapped_column(LedgerDecimal)
    reentry_price_usd: Mapped[Decimal | None] = mapped_column(LedgerDecimal, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    closed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def accumulation_delta(self) -> Decimal | None:
        """Coins gained (or lost) by the round trip; None until a re-entry is linked."""

        if self.new_coin_amount is None:
            return None
        with money_context():
            return self.new_coin_amount - self.old_coin_amount


__all__ = ["SwingStatus", "AccumulationTrade"]
