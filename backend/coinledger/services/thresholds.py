"""Target price formulas shared by the evaluator and the alert ledger."""

from __future__ import annotations

from decimal import Decimal

from ..money import HUNDRED, money_context


def sell_target_price(avg_buy_price: Decimal, threshold_percent: Decimal) -> Decimal:
    with money_context():
        return avg_buy_price * (1 + threshold_percent / HUNDRED)


def buy_target_price(peak_price: Decimal, dip_percent: Decimal) -> Decimal:
    with money_context():
        return peak_price * (1 - dip_percent / HUNDRED)


__all__ = ["sell_target_price", "buy_target_price"]
