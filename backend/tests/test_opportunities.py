import uuid
from decimal import Decimal

import pytest

from coinledger.models import BuyStrategy, PricePeak, SellStrategy, StrategyKind
from coinledger.services import (
    check_buy_opportunity,
    check_sell_opportunity,
    observe_price,
    record_buy,
    record_sell,
    scan_opportunities,
    set_buy_strategy,
    set_sell_strategy,
)
from coinledger.services.opportunities import evaluate_buy, evaluate_sell
from coinledger.services.positions import Position

HOLDER = "holder-1"
ASSET = uuid.uuid4()


def _position(avg: str) -> Position:
    return Position(
        asset_id=ASSET,
        total_bought=Decimal("10"),
        total_sold=Decimal("0"),
        current_balance=Decimal("10"),
        total_invested_usd=Decimal(avg) * 10,
        avg_buy_price=Decimal(avg),
        realized_pnl_total=Decimal("0"),
    )


def _sell_strategy(threshold: str) -> SellStrategy:
    return SellStrategy(asset_id=ASSET, threshold_percent=Decimal(threshold), is_active=True)


def _buy_strategy(dip: str) -> BuyStrategy:
    return BuyStrategy(asset_id=ASSET, threshold_percent=Decimal(dip), buy_amount_usd=Decimal("100"), is_active=True)


@pytest.mark.parametrize("price, fires", [("140", True), ("120", True), ("119.99", False), ("110", False)])
def test_sell_fires_at_threshold_above_average(price, fires):
    opportunity = evaluate_sell(_position("100"), _sell_strategy("20"), Decimal(price))
    assert (opportunity is not None) is fires
    if fires:
        assert opportunity.strategy_type is StrategyKind.SELL
        assert opportunity.reference_price == Decimal("100")
        assert opportunity.target_price == Decimal("120")
        assert opportunity.trigger_price == Decimal(price)


def test_sell_needs_holdings_and_an_active_strategy():
    assert evaluate_sell(_position("0"), _sell_strategy("20"), Decimal("1000")) is None
    assert evaluate_sell(_position("100"), None, Decimal("1000")) is None
    inactive = _sell_strategy("20")
    inactive.is_active = False
    assert evaluate_sell(_position("100"), inactive, Decimal("1000")) is None


@pytest.mark.parametrize("price, fires", [("110", True), ("117", True), ("120", False)])
def test_buy_fires_at_dip_below_peak(price, fires):
    peak = PricePeak(asset_id=ASSET, peak_price=Decimal("130"), is_active=True)
    opportunity = evaluate_buy(peak, _buy_strategy("10"), Decimal(price))
    assert (opportunity is not None) is fires
    if fires:
        assert opportunity.strategy_type is StrategyKind.BUY
        assert opportunity.reference_price == Decimal("130")
        assert opportunity.target_price == Decimal("117")


def test_buy_needs_an_active_peak():
    assert evaluate_buy(None, _buy_strategy("10"), Decimal("1")) is None
    peak = PricePeak(asset_id=ASSET, peak_price=Decimal("130"), is_active=False)
    assert evaluate_buy(peak, _buy_strategy("10"), Decimal("1")) is None


async def test_checks_read_current_ledger_state(database, reference):
    async with database.session() as session:
        await record_buy(
            session,
            HOLDER,
            asset_id=reference.btc,
            exchange_id=reference.binance,
            gross_amount="10",
            unit_price="100",
        )
        assert await check_sell_opportunity(session, HOLDER, reference.btc, "140") is None

        await set_sell_strategy(session, HOLDER, reference.btc, "20")
        await set_buy_strategy(session, HOLDER, reference.btc, "10", "500")
        await observe_price(session, HOLDER, reference.btc, "130")

        sell = await check_sell_opportunity(session, HOLDER, reference.btc, "140")
        assert sell is not None and sell.target_price == Decimal("120")
        assert await check_sell_opportunity(session, HOLDER, reference.btc, "110") is None

        buy = await check_buy_opportunity(session, HOLDER, reference.btc, "110")
        assert buy is not None and buy.reference_price == Decimal("130")
        assert await check_buy_opportunity(session, HOLDER, reference.btc, "120") is None


async def test_scan_raises_one_pending_alert_per_kind(database, reference):
    async with database.session() as session:
        await record_buy(
            session,
            HOLDER,
            asset_id=reference.btc,
            exchange_id=reference.binance,
            gross_amount="10",
            unit_price="100",
        )
        await set_sell_strategy(session, HOLDER, reference.btc, "20")

        first = await scan_opportunities(session, HOLDER, reference.btc, "140")
        assert [outcome.created for outcome in first] == [True]
        assert first[0].alert.strategy_type is StrategyKind.SELL

        again = await scan_opportunities(session, HOLDER, reference.btc, "150")
        assert [outcome.created for outcome in again] == [False]
        assert again[0].alert.id == first[0].alert.id

        assert await scan_opportunities(session, HOLDER, reference.btc, "105") == []


async def test_scan_without_strategies_finds_nothing(database, reference):
    async with database.session() as session:
        assert await scan_opportunities(session, HOLDER, reference.eth, "10") == []


def test_sell_skips_assets_no_longer_held():
    sold_out = Position(
        asset_id=ASSET,
        total_bought=Decimal("10"),
        total_sold=Decimal("10"),
        current_balance=Decimal("0"),
        total_invested_usd=Decimal("1000"),
        avg_buy_price=Decimal("100"),
        realized_pnl_total=Decimal("100"),
    )
    assert evaluate_sell(sold_out, _sell_strategy("20"), Decimal("200")) is None


async def test_sold_out_asset_raises_no_sell_alert(database, reference):
    async with database.session() as session:
        common = {"asset_id": reference.btc, "exchange_id": reference.binance, "gross_amount": "10"}
        await record_buy(session, HOLDER, unit_price="100", **common)
        await record_sell(session, HOLDER, unit_price="110", **common)
        await set_sell_strategy(session, HOLDER, reference.btc, "20")

        assert await check_sell_opportunity(session, HOLDER, reference.btc, "200") is None
        assert await scan_opportunities(session, HOLDER, reference.btc, "200") == []
