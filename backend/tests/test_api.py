from contextlib import asynccontextmanager
from decimal import Decimal

from httpx import ASGITransport, AsyncClient

from coinledger.config import LedgerSettings
from coinledger.db import Database
from coinledger.main import create_app

USER = {"X-User-Id": "holder-1"}


def _client(database: Database):
    app = create_app(database)

    @asynccontextmanager
    async def _manager():
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client

    return _manager


async def _register(api_client: AsyncClient) -> tuple[str, str]:
    asset = await api_client.post("/ledger/assets", json={"symbol": "btc", "name": "Bitcoin"})
    assert asset.status_code == 201
    assert asset.json()["symbol"] == "BTC"
    exchange = await api_client.post("/ledger/exchanges", json={"name": "Binance"})
    assert exchange.status_code == 201
    return asset.json()["id"], exchange.json()["id"]


async def _buy(api_client: AsyncClient, asset_id: str, exchange_id: str, gross: str, price: str, **extra):
    body = {"asset_id": asset_id, "exchange_id": exchange_id, "gross_amount": gross, "unit_price": price, **extra}
    return await api_client.post("/ledger/transactions/buy", json=body, headers=USER)


async def test_health(database):
    async with _client(database)() as api_client:
        response = await api_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "coinledger", "database": "sqlite"}


async def test_reference_data_rejects_duplicates(database):
    async with _client(database)() as api_client:
        await _register(api_client)
        duplicate = await api_client.post("/ledger/assets", json={"symbol": "BTC", "name": "Bitcoin again"})
        assert duplicate.status_code == 422
        assert duplicate.json()["code"] == "VALIDATION_ERROR"

        listed = await api_client.get("/ledger/exchanges")
        assert [item["name"] for item in listed.json()] == ["Binance"]


async def test_trading_flow_and_error_mapping(database):
    async with _client(database)() as api_client:
        asset_id, exchange_id = await _register(api_client)

        bought = await _buy(api_client, asset_id, exchange_id, "10", "100", fee_amount="0.1", fee_currency="BTC")
        assert bought.status_code == 201
        payload = bought.json()
        assert payload["asset_symbol"] == "BTC"
        assert payload["exchange_name"] == "Binance"
        assert Decimal(payload["net_amount"]) == Decimal("9.9")
        assert Decimal(payload["total_spent_usd"]) == Decimal("1000")

        sell_body = {"asset_id": asset_id, "exchange_id": exchange_id, "gross_amount": "4", "unit_price": "150"}
        sold = await api_client.post("/ledger/transactions/sell", json=sell_body, headers=USER)
        assert sold.status_code == 201
        assert Decimal(sold.json()["realized_pnl"]) > 0

        too_much = await api_client.post(
            "/ledger/transactions/sell", json={**sell_body, "gross_amount": "100"}, headers=USER
        )
        assert too_much.status_code == 409
        assert too_much.json()["code"] == "INSUFFICIENT_BALANCE"

        bad_fee = await _buy(api_client, asset_id, exchange_id, "1", "100", fee_amount="1", fee_currency="EUR")
        assert bad_fee.status_code == 422

        missing = await _buy(api_client, exchange_id, exchange_id, "1", "100")
        assert missing.status_code == 404
        assert missing.json()["code"] == "NOT_FOUND"

        listed = await api_client.get("/ledger/transactions", params={"type": "SELL"}, headers=USER)
        assert [row["transaction_type"] for row in listed.json()] == ["SELL"]

        fetched = await api_client.get(f"/ledger/transactions/{payload['id']}", headers=USER)
        assert fetched.json()["id"] == payload["id"]

        anonymous = await api_client.get("/ledger/transactions")
        assert anonymous.status_code == 401


async def test_portfolio_uses_supplied_prices(database):
    async with _client(database)() as api_client:
        asset_id, exchange_id = await _register(api_client)
        await _buy(api_client, asset_id, exchange_id, "2", "100")

        response = await api_client.get("/ledger/portfolio", params={"price": "BTC:150"}, headers=USER)
        assert response.status_code == 200
        (summary,) = response.json()
        assert Decimal(summary["position"]["current_balance"]) == Decimal("2")
        assert Decimal(summary["valuation"]["unrealized_pnl"]) == Decimal("100")
        assert summary["exchanges"][0]["exchange_name"] == "Binance"

        single = await api_client.get(f"/ledger/portfolio/{asset_id}", params={"price": "90"}, headers=USER)
        assert Decimal(single.json()["valuation"]["unrealized_pnl"]) == Decimal("-20")

        malformed = await api_client.get("/ledger/portfolio", params={"price": "BTC"}, headers=USER)
        assert malformed.status_code == 422


async def test_strategy_scan_and_alert_lifecycle(database):
    async with _client(database)() as api_client:
        asset_id, exchange_id = await _register(api_client)
        await _buy(api_client, asset_id, exchange_id, "10", "100")

        strategy = await api_client.put(
            f"/ledger/strategies/{asset_id}/sell", json={"threshold_percent": "20"}, headers=USER
        )
        assert strategy.status_code == 200
        assert strategy.json()["kind"] == "SELL"

        dip = await api_client.put(
            f"/ledger/strategies/{asset_id}/buy", json={"dip_percent": "10", "buy_amount_usd": "500"}, headers=USER
        )
        assert Decimal(dip.json()["buy_amount_usd"]) == Decimal("500")

        observed = await api_client.post(f"/ledger/prices/{asset_id}/observe", json={"price": "130"}, headers=USER)
        assert Decimal(observed.json()["peak_price"]) == Decimal("130")
        peak = await api_client.get(f"/ledger/prices/{asset_id}/peak", headers=USER)
        assert peak.json()["is_active"] is True

        scan = await api_client.post(f"/ledger/prices/{asset_id}/scan", json={"price": "140"}, headers=USER)
        results = scan.json()
        assert [(item["alert"]["strategy_type"], item["created"]) for item in results] == [("SELL", True)]
        alert_id = results[0]["alert"]["id"]

        pending = await api_client.get("/ledger/alerts", headers=USER)
        assert [alert["id"] for alert in pending.json()] == [alert_id]

        acknowledged = await api_client.post(f"/ledger/alerts/{alert_id}/acknowledge", headers=USER)
        assert acknowledged.json()["status"] == "ACKNOWLEDGED"
        executed = await api_client.post(f"/ledger/alerts/{alert_id}/execute", headers=USER)
        assert executed.json()["status"] == "EXECUTED"
        conflict = await api_client.post(f"/ledger/alerts/{alert_id}/dismiss", headers=USER)
        assert conflict.status_code == 409
        assert conflict.json()["code"] == "INVALID_STATE"

        strategies = await api_client.get("/ledger/strategies", headers=USER)
        assert {item["kind"] for item in strategies.json()} == {"SELL", "BUY"}
        removed = await api_client.delete(f"/ledger/strategies/{asset_id}/BUY", headers=USER)
        assert removed.json()["is_active"] is False


async def test_swing_endpoints(database):
    async with _client(database)() as api_client:
        asset_id, exchange_id = await _register(api_client)
        await _buy(api_client, asset_id, exchange_id, "10", "100", transaction_date="2024-05-01T00:00:00Z")
        sold = await api_client.post(
            "/ledger/transactions/sell",
            json={
                "asset_id": asset_id,
                "exchange_id": exchange_id,
                "gross_amount": "4",
                "unit_price": "150",
                "transaction_date": "2024-05-02T00:00:00Z",
            },
            headers=USER,
        )
        rebought = await _buy(api_client, asset_id, exchange_id, "5", "120", transaction_date="2024-05-03T00:00:00Z")

        opened = await api_client.post(
            "/ledger/swings", json={"exit_transaction_id": sold.json()["id"]}, headers=USER
        )
        assert opened.status_code == 201
        assert opened.json()["accumulation_delta"] is None

        closed = await api_client.post(
            f"/ledger/swings/{opened.json()['id']}/close",
            json={"reentry_transaction_id": rebought.json()["id"]},
            headers=USER,
        )
        assert closed.json()["status"] == "CLOSED"
        assert Decimal(closed.json()["accumulation_delta"]) == Decimal("1")

        cancelled = await api_client.post(f"/ledger/swings/{opened.json()['id']}/cancel", headers=USER)
        assert cancelled.status_code == 409


async def test_internal_token_is_enforced_when_configured(database, monkeypatch):
    settings = LedgerSettings(internal_auth_token="s3cret")
    monkeypatch.setattr("coinledger.api.dependencies.get_settings", lambda: settings)

    async with _client(database)() as api_client:
        denied = await api_client.get("/ledger/assets")
        assert denied.status_code == 401
        allowed = await api_client.get("/ledger/assets", headers={"X-Internal-Token": "s3cret"})
        assert allowed.status_code == 200


async def test_peak_tracking_can_be_switched_off(database):
    async with _client(database)() as api_client:
        asset_id, exchange_id = await _register(api_client)
        untracked = await api_client.get(f"/ledger/prices/{asset_id}/peak", headers=USER)
        assert untracked.status_code == 404

        await _buy(api_client, asset_id, exchange_id, "1", "100")
        removed = await api_client.delete(f"/ledger/prices/{asset_id}/peak", headers=USER)
        assert removed.json()["is_active"] is False

        observed = await api_client.post(f"/ledger/prices/{asset_id}/observe", json={"price": "500"}, headers=USER)
        assert Decimal(observed.json()["peak_price"]) == Decimal("100")

        bar = await api_client.post(
            f"/ledger/prices/{asset_id}/daily",
            json={"day_date": "2024-01-01", "high_price": "110", "low_price": "90", "closing_price": "95"},
        )
        assert bar.status_code == 201
        bars = await api_client.get(f"/ledger/prices/{asset_id}/daily")
        assert [item["day_date"] for item in bars.json()] == ["2024-01-01"]
