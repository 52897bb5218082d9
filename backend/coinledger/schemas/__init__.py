"""Pydantic schemas for the ledger API."""

from .ledger import (
    BuyRequest,
    DailyPriceRequest,
    DailyPriceSchema,
    ExchangePositionSchema,
    PositionSchema,
    PositionSummarySchema,
    SellRequest,
    TransactionSchema,
    ValuationSchema,
)
from .reference import AssetCreateRequest, AssetSchema, ExchangeCreateRequest, ExchangeSchema
from .strategy import (
    AlertSchema,
    BuyStrategyRequest,
    PeakSchema,
    PriceObservationRequest,
    ScanResultSchema,
    SellStrategyRequest,
    StrategySchema,
    SwingCloseRequest,
    SwingOpenRequest,
    SwingSchema,
)

__all__ = [
    "AlertSchema",
    "AssetCreateRequest",
    "AssetSchema",
    "BuyRequest",
    "BuyStrategyRequest",
    "DailyPriceRequest",
    "DailyPriceSchema",
    "ExchangeCreateRequest",
    "ExchangePositionSchema",
    "ExchangeSchema",
    "PeakSchema",
    "PositionSchema",
    "PositionSummarySchema",
    "PriceObservationRequest",
    "ScanResultSchema",
    "SellRequest",
    "SellStrategyRequest",
    "StrategySchema",
    "SwingCloseRequest",
    "SwingOpenRequest",
    "SwingSchema",
    "TransactionSchema",
    "ValuationSchema",
]
