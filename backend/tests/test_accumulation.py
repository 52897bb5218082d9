from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from coinledger.errors import InvalidStateError, NotFoundError
from coinledger.models import SwingStatus
from coinledger.services import cancel_swing, close_swing, get_swing, list_swings, open_swing, record_buy, record_sell

HOLDER = "holder-1"


def _day(day: int) -> datetime:
    return datetime(2024, 5, day, tzinfo=timezone.utc)


async def _history(session, reference) -> SimpleNamespace:
    """BUY 10@100, SELL 4@150, SELL 1@160, BUY 5@120 on consecutive days."""

    common = {"asset_id": reference.btc, "exchange_id": reference.binance}
    buy1 = await record_buy(session, HOLDER, gross_amount="10", unit_price="100", transaction_date=_day(1), **common)
    sell1 = await record_sell(session, HOLDER, gross_amount="4", unit_price="150", transaction_date=_day(2), **common)
    sell2 = await record_sell(session, HOLDER, gross_amount="1", unit_price="160", transaction_date=_day(3), **common)
    buy2 = await record_buy(session, HOLDER, gross_amount="5", unit_price="120", transaction_date=_day(4), **common)
    return SimpleNamespace(buy1=buy1.id, sell1=sell1.id, sell2=sell2.id, buy2=buy2.id)


async def test_swing_round_trip_measures_coins_gained(database, reference):
    async with database.session() as session:
        txs = await _history(session, reference)
        trade = await open_swing(session, HOLDER, txs.sell1, notes="  take profit  ")

        assert trade.status is SwingStatus.OPEN
        assert trade.old_coin_amount == Decimal("4")
        assert trade.exit_price_usd == Decimal("150")
        assert trade.accumulation_delta is None
        assert trade.notes == "take profit"

        closed = await close_swing(session, HOLDER, trade.id, txs.buy2)
        assert closed.status is SwingStatus.CLOSED
        assert closed.new_coin_amount == Decimal("5")
        assert closed.reentry_price_usd == Decimal("120")
        assert closed.accumulation_delta == Decimal("1")
        assert closed.closed_at is not None

        with pytest.raises(InvalidStateError):
            await close_swing(session, HOLDER, trade.id, txs.buy2)


async def test_swing_must_start_from_an_unlinked_sell(database, reference):
    async with database.session() as session:
        txs = await _history(session, reference)
        with pytest.raises(InvalidStateError):
            await open_swing(session, HOLDER, txs.buy1)

        await open_swing(session, HOLDER, txs.sell1)
        with pytest.raises(InvalidStateError):
            await open_swing(session, HOLDER, txs.sell1)

        with pytest.raises(NotFoundError):
            await open_swing(session, "someone-else", txs.sell2)


async def test_reentry_must_be_a_later_unused_buy(database, reference):
    async with database.session() as session:
        txs = await _history(session, reference)
        first = await open_swing(session, HOLDER, txs.sell1)
        second = await open_swing(session, HOLDER, txs.sell2)
        first_id, second_id = first.id, second.id

        with pytest.raises(InvalidStateError):
            await close_swing(session, HOLDER, first_id, txs.sell2)
        with pytest.raises(InvalidStateError):
            await close_swing(session, HOLDER, second_id, txs.buy1)

        await close_swing(session, HOLDER, first_id, txs.buy2)
        with pytest.raises(InvalidStateError):
            await close_swing(session, HOLDER, second_id, txs.buy2)

        still_open = await get_swing(session, HOLDER, second_id)
        assert still_open.status is SwingStatus.OPEN


async def test_cancelled_swing_frees_its_sell(database, reference):
    async with database.session() as session:
        txs = await _history(session, reference)
        trade = await open_swing(session, HOLDER, txs.sell1)
        cancelled = await cancel_swing(session, HOLDER, trade.id)

        assert cancelled.status is SwingStatus.CANCELLED
        assert cancelled.closed_at is None
        assert cancelled.accumulation_delta is None
        with pytest.raises(InvalidStateError):
            await close_swing(session, HOLDER, trade.id, txs.buy2)

        reopened = await open_swing(session, HOLDER, txs.sell1)
        assert reopened.id != trade.id

        assert [row.id for row in await list_swings(session, HOLDER, status=SwingStatus.OPEN)] == [reopened.id]
        assert len(await list_swings(session, HOLDER)) == 2
