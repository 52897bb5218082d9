"""Alerts produced by triggered strategies."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Enum, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from ..db.base import Base
from ..db.types import LedgerDecimal, UTCDateTime, utc_now
from .strategy import StrategyKind


class AlertStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    EXECUTED = "EXECUTED"
    DISMISSED = "DISMISSED"


class StrategyAlert(Base):
    __tablename__ = "strategy_alerts"
    __table_args__ = (
        Index("ix_strategy_alerts_holder_status", "holder_id", "status"),
        Index(
            "uq_strategy_alert_pending",
            "holder_id",
            "asset_id",
            "strategy_type",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    holder_id: Mapped[str] = mapped_column(String(64))
    asset_id: Mapped[UUID] = mapped_column(ForeignKey("assets.id"))
    strategy_type: Mapped[StrategyKind] = mapped_column(Enum(StrategyKind, name="strategy_kind"))
    trigger_price: Mapped[Decimal] = mapped_column(LedgerDecimal)
    threshold_percent: Mapped[Decimal] = mapped_column(LedgerDecimal)
    reference_price: Mapped[Decimal] = mapped_column(LedgerDecimal)
    target_price: Mapped[Decimal] = mapped_column(LedgerDecimal)
    status: Mapped[AlertStatus] = mapped_column(Enum(AlertStatus, name="alert_status"), default=AlertStatus.PENDING)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    acknowledged_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    executed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    dismissed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)


__all__ = ["AlertStatus", "StrategyAlert"]
