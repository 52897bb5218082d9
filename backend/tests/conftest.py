import asyncio
import inspect
import pathlib
import sys
from types import SimpleNamespace

import pytest
from sqlalchemy.pool import NullPool

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from coinledger.db import Database  # noqa: E402
from coinledger.services import create_asset, create_exchange  # noqa: E402

def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            testargs = {arg: pyfuncitem.funcargs[arg] for arg in pyfuncitem._fixtureinfo.argnames}
            loop.run_until_complete(test_function(**testargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture
def database(tmp_path: pathlib.Path) -> Database:
    # Every test runs on its own event loop, so connections must not be pooled across loops.
    db = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", poolclass=NullPool)
    asyncio.run(db.create_all())
    return db


@pytest.fixture
def reference(database: Database) -> SimpleNamespace:
    """Register BTC, ETH, Binance and Kraken and return their ids."""

    async def _seed() -> SimpleNamespace:
        async with database.session() as session:
            btc = await create_asset(session, "BTC", "Bitcoin")
            eth = await create_asset(session, "ETH", "Ethereum")
            binance = await create_exchange(session, "Binance")
            kraken = await create_exchange(session, "Kraken")
            return SimpleNamespace(btc=btc.id, eth=eth.id, binance=binance.id, kraken=kraken.id)

    return asyncio.run(_seed())
