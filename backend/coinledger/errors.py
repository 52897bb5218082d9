"""Error kinds surfaced by the ledger services."""

from __future__ import annotations

from decimal import Decimal
from typing import Any


class LedgerError(Exception):
    """Base class for all ledger failures; ``code`` is stable for API clients."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(LedgerError, ValueError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, field: str | None = None, value: Any = None) -> None:
        super().__init__(message, field=field, value=value)
        self.field = field
        self.value = value


class InsufficientBalanceError(LedgerError):
    code = "INSUFFICIENT_BALANCE"

    def __init__(self, asset_id: Any, requested: Decimal, available: Decimal) -> None:
        super().__init__(
            f"Cannot sell {requested} of asset {asset_id}: only {available} held",
            asset_id=asset_id,
            requested=requested,
            available=available,
        )
        self.asset_id = asset_id
        self.requested = requested
        self.available = available


class InvalidStateError(LedgerError):
    code = "INVALID_STATE"


class NotFoundError(LedgerError, LookupError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, identifier: Any) -> None:
        super().__init__(f"{entity} {identifier} not found", entity=entity, identifier=identifier)
        self.entity = entity
        self.identifier = identifier


__all__ = [
    "LedgerError",
    "ValidationError",
    "InsufficientBalanceError",
    "InvalidStateError",
    "NotFoundError",
]
