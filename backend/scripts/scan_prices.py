"""Feed current prices to the peak tracker and opportunity scan for one holder."""

from __future__ import annotations

import argparse
import asyncio
import logging
from decimal import Decimal

from coinledger.config import get_settings
from coinledger.core.logging import setup_logging
from coinledger.db import Database
from coinledger.errors import ValidationError
from coinledger.money import require_positive, to_decimal
from coinledger.services import observe_price, scan_opportunities
from coinledger.services.alerts import AlertOutcome
from coinledger.services.reference import get_asset_by_symbol

logger = logging.getLogger("coinledger.scripts.scan_prices")


def parse_quote(raw: str) -> tuple[str, Decimal]:
    symbol, sep, value = raw.partition("=")
    if not sep or not symbol.strip():
        raise ValidationError("Quotes must look like SYMBOL=PRICE", field="quote", value=raw)
    return symbol.strip(), require_positive(to_decimal(value, field="quote"), "quote")


async def scan_quotes(database: Database, holder_id: str, quotes: list[tuple[str, Decimal]]) -> list[AlertOutcome]:
    outcomes: list[AlertOutcome] = []
    async with database.session() as session:
        for symbol, price in quotes:
            asset = await get_asset_by_symbol(session, symbol)
            await observe_price(session, holder_id, asset.id, price)
            outcomes.extend(await scan_opportunities(session, holder_id, asset.id, price))
    return outcomes


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Observe prices and scan for sell/buy opportunities")
    parser.add_argument("quotes", nargs="+", metavar="SYMBOL=PRICE")
    parser.add_argument("--holder", required=True, help="Holder identifier the ledger rows belong to")
    parser.add_argument("--database-url", default=None, help="Override COINLEDGER_DATABASE_URL")
    args = parser.parse_args(argv)

    setup_logging(get_settings().log_level)
    try:
        quotes = [parse_quote(raw) for raw in args.quotes]
    except ValidationError as exc:
        parser.error(exc.message)

    async def _run() -> list[AlertOutcome]:
        database = Database(url=args.database_url)
        try:
            return await scan_quotes(database, args.holder, quotes)
        finally:
            await database.dispose()

    for outcome in asyncio.run(_run()):
        alert = outcome.alert
        state = "new" if outcome.created else "pending"
        print(
            f"{state:<8} {alert.strategy_type.value:<4} {alert.asset_id} "
            f"trigger={alert.trigger_price} target={alert.target_price}"
        )


if __name__ == "__main__":
    main()
