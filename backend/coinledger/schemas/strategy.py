"""Schemas for strategies, peaks, alerts and swing trades."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import AlertStatus, StrategyKind, SwingStatus


class SellStrategyRequest(BaseModel):
    threshold_percent: Decimal = Field(..., description="Required gain over the average buy price, in percent")


class BuyStrategyRequest(BaseModel):
    dip_percent: Decimal = Field(..., description="Required dip below the tracked peak, in percent")
    buy_amount_usd: Decimal


class StrategySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    kind: StrategyKind
    asset_id: UUID
    threshold_percent: Decimal
    buy_amount_usd: Decimal | None = None
    is_active: bool
    created_at: datetime
    deactivated_at: datetime | None = None


class PriceObservationRequest(BaseModel):
    price: Decimal
    observed_at: datetime | None = None


class PeakSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset_id: UUID
    peak_price: Decimal
    peak_timestamp: datetime
    transaction_id: UUID
    is_active: bool


class AlertSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    asset_id: UUID
    strategy_type: StrategyKind
    trigger_price: Decimal
    threshold_percent: Decimal
    reference_price: Decimal
    target_price: Decimal
    status: AlertStatus
    created_at: datetime
    acknowledged_at: datetime | None = None
    executed_at: datetime | None = None
    dismissed_at: datetime | None = None


class ScanResultSchema(BaseModel):
    alert: AlertSchema
    created: bool


class SwingOpenRequest(BaseModel):
    exit_transaction_id: UUID
    notes: str | None = Field(default=None, max_length=2000)


class SwingCloseRequest(BaseModel):
    reentry_transaction_id: UUID


class SwingSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    asset_id: UUID
    exit_transaction_id: UUID
    reentry_transaction_id: UUID | None = None
    old_coin_amount: Decimal
    new_coin_amount: Decimal | None = None
    accumulation_delta: Decimal | None = None
    status: SwingStatus
    exit_price_usd: Decimal
    reentry_price_usd: Decimal | None = None
    created_at: datetime
    closed_at: datetime | None = None
    notes: str | None = None
