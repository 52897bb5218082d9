import asyncio
import json
from decimal import Decimal

import pytest

from coinledger.errors import ValidationError
from coinledger.services import list_alerts, list_assets, record_buy, set_sell_strategy
from scripts import load_seed, scan_prices

HOLDER = "holder-1"


def test_load_seed_skips_existing_entries(database, tmp_path, capsys):
    seed = {
        "assets": [{"symbol": "btc", "name": "Bitcoin"}, {"symbol": "SOL", "name": "Solana"}],
        "exchanges": [{"name": "Binance"}, {"name": "Coinbase"}],
    }
    seed_path = tmp_path / "seed.json"
    seed_path.write_text(json.dumps(seed))

    assert asyncio.run(load_seed.load_seed(database, seed)) == (2, 2)
    assert asyncio.run(load_seed.load_seed(database, seed)) == (0, 0)

    load_seed.main([str(seed_path), "--database-url", database.url])
    assert "Created 0 assets and 0 exchanges" in capsys.readouterr().out


def test_parse_quote():
    assert scan_prices.parse_quote("btc=101.5") == ("btc", Decimal("101.5"))
    with pytest.raises(ValidationError):
        scan_prices.parse_quote("BTC")
    with pytest.raises(ValidationError):
        scan_prices.parse_quote("BTC=-1")


def test_scan_quotes_observes_and_raises_alerts(database, reference):
    async def _prepare() -> None:
        async with database.session() as session:
            await record_buy(
                session,
                HOLDER,
                asset_id=reference.btc,
                exchange_id=reference.binance,
                gross_amount="1",
                unit_price="100",
            )
            await set_sell_strategy(session, HOLDER, reference.btc, "20")

    async def _alerts():
        async with database.session() as session:
            assert len(await list_assets(session)) == 2
            return await list_alerts(session, HOLDER)

    asyncio.run(_prepare())
    outcomes = asyncio.run(scan_prices.scan_quotes(database, HOLDER, [("BTC", Decimal("125"))]))
    assert [outcome.created for outcome in outcomes] == [True]
    assert len(asyncio.run(_alerts())) == 1
