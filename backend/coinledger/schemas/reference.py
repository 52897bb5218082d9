"""Schemas for assets and exchanges."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AssetCreateRequest(BaseModel):
    symbol: str = Field(..., min_length=1, max_length=10, examples=["BTC"])
    name: str = Field(..., min_length=1, max_length=50, examples=["Bitcoin"])


class AssetSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    symbol: str
    name: str


class ExchangeCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, examples=["Binance"])


class ExchangeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
