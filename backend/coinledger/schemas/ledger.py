"""Schemas for transactions, positions and daily prices."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import TransactionType


class _TradeRequest(BaseModel):
    asset_id: UUID
    exchange_id: UUID
    gross_amount: Decimal = Field(..., description="Coins ordered, before any coin-denominated fee")
    unit_price: Decimal = Field(..., description="USD price of one coin at trade time")
    fee_amount: Decimal = Field(default=Decimal("0"))
    fee_currency: str | None = Field(default=None, description="Asset symbol or USD; defaults to USD")
    transaction_date: datetime | None = None


class BuyRequest(_TradeRequest):
    fee_usd_add_on: Decimal = Field(default=Decimal("0"), description="Extra USD charge added to total spent")


class SellRequest(_TradeRequest):
    pass


class TransactionSchema(BaseModel):
    id: UUID
    asset_id: UUID
    asset_symbol: str
    exchange_id: UUID
    exchange_name: str
    transaction_type: TransactionType
    gross_amount: Decimal
    fee_amount: Decimal
    fee_currency: str
    net_amount: Decimal
    unit_price_usd: Decimal
    total_spent_usd: Decimal
    realized_pnl: Decimal | None = None
    transaction_date: datetime


class PositionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_bought: Decimal
    total_sold: Decimal
    current_balance: Decimal
    total_invested_usd: Decimal
    avg_buy_price: Decimal
    realized_pnl_total: Decimal
    transaction_count: int


class ValuationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_price: Decimal
    current_value: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal


class ExchangePositionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    exchange_id: UUID
    exchange_name: str
    position: PositionSchema


class PositionSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset_id: UUID
    symbol: str
    name: str
    position: PositionSchema
    valuation: ValuationSchema | None = None
    exchanges: list[ExchangePositionSchema] = Field(default_factory=list)


class DailyPriceRequest(BaseModel):
    day_date: date
    high_price: Decimal
    low_price: Decimal
    closing_price: Decimal


class DailyPriceSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asset_id: UUID
    day_date: date
    high_price: Decimal
    low_price: Decimal
    closing_price: Decimal
