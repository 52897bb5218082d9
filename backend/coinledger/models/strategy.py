"""Per-asset sell and buy-the-dip strategy models."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.base import Base
from ..db.types import LedgerDecimal, UTCDateTime, utc_now


class StrategyKind(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


def _one_active_per_asset(name: str) -> Index:
    return Index(
        name,
        "holder_id",
        "asset_id",
        unique=True,
        postgresql_where=text("is_active"),
        sqlite_where=text("is_active = 1"),
    )


class SellStrategy(Base):
    """Fire when price reaches ``threshold_percent`` above the average buy price."""

    __tablename__ = "sell_strategies"
    __table_args__ = (_one_active_per_asset("uq_sell_strategy_active"),)

    kind = StrategyKind.SELL

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    holder_id: Mapped[str] = mapped_column(String(64), index=True)
    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets.id"))
    threshold_percent: Mapped[Decimal] = mapped_column(LedgerDecimal)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    deactivated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


class BuyStrategy(Base):
    """Fire when price dips ``threshold_percent`` below the tracked peak."""

    __tablename__ = "buy_strategies"
    __table_args__ = (_one_active_per_asset("uq_buy_strategy_active"),)

    kind = StrategyKind.BUY

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    holder_id: Mapped[str] = mapped_column(String(64), index=True)
    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets.id"))
    threshold_percent: Mapped[Decimal] = mapped_column(LedgerDecimal)
    buy_amount_usd: Mapped[Decimal] = mapped_column(LedgerDecimal)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    deactivated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


__all__ = ["StrategyKind", "SellStrategy", "BuyStrategy"]
