"""Load assets and exchanges from a JSON seed document into the ledger database."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from coinledger.config import get_settings
from coinledger.core.logging import setup_logging
from coinledger.db import Database
from coinledger.services import reference

logger = logging.getLogger("coinledger.scripts.load_seed")


async def load_seed(database: Database, payload: dict[str, Any]) -> tuple[int, int]:
    """Create missing assets and exchanges; returns how many of each were added."""

    await database.create_all()
    created_assets = 0
    created_exchanges = 0
    async with database.session() as session:
        known_symbols = {asset.symbol for asset in await reference.list_assets(session)}
        for item in payload.get("assets", []):
            symbol = reference.normalize_symbol(item["symbol"])
            if symbol in known_symbols:
                logger.info("Asset %s already present; skipping", symbol)
                continue
            await reference.create_asset(session, symbol, item["name"])
            known_symbols.add(symbol)
            created_assets += 1

        known_exchanges = {exchange.name for exchange in await reference.list_exchanges(session)}
        for item in payload.get("exchanges", []):
            name = item["name"].strip()
            if name in known_exchanges:
                logger.info("Exchange %s already present; skipping", name)
                continue
            await reference.create_exchange(session, name)
            known_exchanges.add(name)
            created_exchanges += 1
    return created_assets, created_exchanges


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Load seed reference data into the coin ledger database")
    parser.add_argument("seed_file", nargs="?", default="coinledger_seed.json")
    parser.add_argument("--database-url", default=None, help="Override COINLEDGER_DATABASE_URL")
    args = parser.parse_args(argv)

    setup_logging(get_settings().log_level)
    seed_path = Path(args.seed_file)
    if not seed_path.exists():
        raise SystemExit(f"Seed file not found: {seed_path}")
    payload = json.loads(seed_path.read_text())

    async def _run() -> tuple[int, int]:
        database = Database(url=args.database_url)
        try:
            return await load_seed(database, payload)
        finally:
            await database.dispose()

    assets, exchanges = asyncio.run(_run())
    print(f"Created {assets} assets and {exchanges} exchanges from {seed_path}")


if __name__ == "__main__":
    main()
