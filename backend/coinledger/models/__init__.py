"""Database model exports."""

from .accumulation import AccumulationTrade, SwingStatus
from .alert import AlertStatus, StrategyAlert
from .ledger import PricePeak, Transaction, TransactionType
from .market import DailyPrice
from .outbox import LedgerEvent
from .reference import Asset, Exchange
from .strategy import BuyStrategy, SellStrategy, StrategyKind

__all__ = [
    "Asset",
    "Exchange",
    "Transaction",
    "TransactionType",
    "PricePeak",
    "SellStrategy",
    "BuyStrategy",
    "StrategyKind",
    "StrategyAlert",
    "AlertStatus",
    "AccumulationTrade",
    "SwingStatus",
    "DailyPrice",
    "LedgerEvent",
]
