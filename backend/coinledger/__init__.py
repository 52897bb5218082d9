"""Coin ledger with an embedded sell/buy-the-dip rules engine."""

from .errors import (
    InsufficientBalanceError,
    InvalidStateError,
    LedgerError,
    NotFoundError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "LedgerError",
    "ValidationError",
    "InsufficientBalanceError",
    "InvalidStateError",
    "NotFoundError",
    "__version__",
]
