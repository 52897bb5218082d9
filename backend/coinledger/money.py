"""Fixed-point decimal helpers shared by every ledger computation.

Intermediate arithmetic runs inside :data:`MONEY_CONTEXT`; values are rounded
half-up to :data:`STORAGE_SCALE` fractional digits only when written to a row.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Context, Decimal, InvalidOperation, localcontext

from .errors import ValidationError

STORAGE_SCALE = 18
STORAGE_PRECISION = 38
STORAGE_QUANTUM = Decimal(1).scaleb(-STORAGE_SCALE)
# Largest decimal exponent that still fits NUMERIC(STORAGE_PRECISION, STORAGE_SCALE).
MAX_STORAGE_EXPONENT = STORAGE_PRECISION - STORAGE_SCALE - 1

MONEY_CONTEXT = Context(prec=40, rounding=ROUND_HALF_EVEN)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def money_context():
    """Return a context manager activating the ledger decimal context."""

    return localcontext(MONEY_CONTEXT)


def to_decimal(value: Decimal | int | float | str, *, field: str = "value") -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field, value=value)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} is not a valid decimal", field=field, value=value) from exc
    if not result.is_finite():
        raise ValidationError(f"{field} must be finite", field=field, value=value)
    return result


def require_storable(value: Decimal, field: str) -> Decimal:
    if value and value.adjusted() > MAX_STORAGE_EXPONENT:
        raise ValidationError(
            f"{field} exceeds the {STORAGE_PRECISION - STORAGE_SCALE} integer digits a ledger amount can hold",
            field=field,
            value=value,
        )
    return value


def quantize_storage(value: Decimal, field: str = "value") -> Decimal:
    require_storable(value, field)
    with money_context():
        return value.quantize(STORAGE_QUANTUM, rounding=ROUND_HALF_UP)


def require_positive(value: Decimal, field: str) -> Decimal:
    if value <= ZERO:
        raise ValidationError(f"{field} must be greater than zero", field=field, value=value)
    return value


def require_non_negative(value: Decimal, field: str) -> Decimal:
    if value < ZERO:
        raise ValidationError(f"{field} must not be negative", field=field, value=value)
    return value


__all__ = [
    "STORAGE_SCALE",
    "STORAGE_PRECISION",
    "MONEY_CONTEXT",
    "ZERO",
    "HUNDRED",
    "money_context",
    "to_decimal",
    "quantize_storage",
    "require_positive",
    "require_non_negative",
    "require_storable",
]
