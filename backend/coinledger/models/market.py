"""Caller-supplied daily price bars."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Date, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..db.base import Base
from ..db.types import LedgerDecimal, UTCDateTime, utc_now


class DailyPrice(Base):
    __tablename__ = "daily_prices"
    __table_args__ = (UniqueConstraint("asset_id", "day_date", name="uq_daily_price_asset_day"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets.id"))
    day_date: Mapped[date] = mapped_column(Date)
    high_price: Mapped[Decimal] = mapped_column(LedgerDecimal)
    low_price: Mapped[Decimal] = mapped_column(LedgerDecimal)
    closing_price: Mapped[Decimal] = mapped_column(LedgerDecimal)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)


__all__ = ["DailyPrice"]
