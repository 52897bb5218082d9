from datetime import datetime, timezone
from decimal import Decimal

import pytest

from coinledger.errors import NotFoundError, ValidationError
from coinledger.services import deactivate_peak, get_peak, observe_price, record_buy

HOLDER = "holder-1"


async def _buy(session, reference, price: str):
    return await record_buy(
        session,
        HOLDER,
        asset_id=reference.btc,
        exchange_id=reference.binance,
        gross_amount="1",
        unit_price=price,
    )


async def test_observation_before_any_buy_is_a_no_op(database, reference):
    async with database.session() as session:
        assert await observe_price(session, HOLDER, reference.btc, "50000") is None
        assert await get_peak(session, HOLDER, reference.btc) is None


async def test_peak_only_moves_up(database, reference):
    async with database.session() as session:
        await _buy(session, reference, "100")
        seen_at = datetime(2024, 3, 1, 12, tzinfo=timezone.utc)

        peak = await observe_price(session, HOLDER, reference.btc, "130", seen_at)
        assert peak.peak_price == Decimal("130")
        assert peak.peak_timestamp == seen_at

        peak = await observe_price(session, HOLDER, reference.btc, "120")
        assert peak.peak_price == Decimal("130")
        assert peak.peak_timestamp == seen_at

        peak = await observe_price(session, HOLDER, reference.btc, "130")
        assert peak.peak_timestamp == seen_at


async def test_buy_after_a_rally_re_anchors_the_peak(database, reference):
    async with database.session() as session:
        await _buy(session, reference, "100")
        await observe_price(session, HOLDER, reference.btc, "150")
        buy = await _buy(session, reference, "110")

        peak = await get_peak(session, HOLDER, reference.btc)
        assert peak.peak_price == Decimal("110")
        assert peak.transaction_id == buy.id


async def test_deactivated_peak_ignores_prices(database, reference):
    async with database.session() as session:
        await _buy(session, reference, "100")
        await deactivate_peak(session, HOLDER, reference.btc)

        peak = await observe_price(session, HOLDER, reference.btc, "200")
        assert peak.is_active is False
        assert peak.peak_price == Decimal("100")

        await _buy(session, reference, "90")
        peak = await get_peak(session, HOLDER, reference.btc)
        assert peak.is_active is True


async def test_observation_validation(database, reference):
    async with database.session() as session:
        with pytest.raises(ValidationError):
            await observe_price(session, HOLDER, reference.btc, "0")
        with pytest.raises(NotFoundError):
            await observe_price(session, HOLDER, reference.binance, "10")
        with pytest.raises(NotFoundError):
            await deactivate_peak(session, HOLDER, reference.eth)
