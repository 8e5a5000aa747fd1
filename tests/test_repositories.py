import asyncio

import pytest

from fks_client.core.errors import ApiError, NetworkError
from fks_client.core.token_manager import TokenManager
from fks_client.models import AssetPriceResponse, TokenResponse
from fks_client.repositories import AuthRepository, DataRepository, PortfolioRepository, SignalRepository

TOKEN = {"access_token": "tok-1", "token_type": "bearer", "expires_in": 3600}
PRICE = {"symbol": "BTC/USD", "price": 42000.0, "timestamp": 1700000000, "provider": "binance"}


# ---------------- Auth ----------------

def test_login_stores_token_and_starts_refresh(fake_client):
    fake_client.routes["/api/v1/auth/login"] = TOKEN

    async def scenario():
        manager = TokenManager(fake_client)
        repo = AuthRepository(fake_client, manager)
        response = await repo.login("alice", "secret")
        state = (manager.is_token_valid.value, manager.is_refreshing)
        manager.stop_auto_refresh()
        return response, state

    response, (valid, refreshing) = asyncio.run(scenario())
    assert response.access_token == "tok-1"
    assert fake_client.auth_token == "tok-1"
    assert valid
    assert refreshing

    method, endpoint, base_url, _, body = fake_client.calls[0]
    assert (method, endpoint, base_url) == ("POST", "/api/v1/auth/login", fake_client.auth_url)
    assert body.username == "alice"
    assert body.password == "secret"


def test_refresh_interval_from_expiry(fake_client):
    repo = AuthRepository(fake_client, TokenManager(fake_client))
    assert repo.refresh_interval_minutes(TokenResponse("t", expires_in=3600)) == 60
    assert repo.refresh_interval_minutes(TokenResponse("t", expires_in=1799)) == 29
    assert repo.refresh_interval_minutes(TokenResponse("t", expires_in=30)) == 1
    assert repo.refresh_interval_minutes(TokenResponse("t")) == 15


def test_login_requires_credentials(fake_client):
    repo = AuthRepository(fake_client, TokenManager(fake_client))
    with pytest.raises(ValueError):
        asyncio.run(repo.login("", "secret"))
    assert fake_client.calls == []


def test_login_rejected_stores_nothing(fake_client):
    fake_client.routes["/api/v1/auth/login"] = ApiError(401, "Invalid credentials")
    manager = TokenManager(fake_client)
    repo = AuthRepository(fake_client, manager)

    with pytest.raises(ApiError):
        asyncio.run(repo.login("alice", "wrong"))
    assert fake_client.auth_token is None
    assert manager.is_token_valid.value is False
    assert not manager.is_refreshing


def test_logout_ignores_server_errors(fake_client):
    fake_client.routes["/api/v1/auth/logout"] = NetworkError("connection refused")
    fake_client.set_auth_token("tok-1")
    manager = TokenManager(fake_client)
    manager.mark_token_valid()

    asyncio.run(AuthRepository(fake_client, manager).logout())
    assert fake_client.auth_token is None
    assert manager.is_token_valid.value is False


def test_refresh_token_replaces_token(fake_client):
    fake_client.routes["/api/v1/auth/refresh"] = {"access_token": "tok-2"}
    fake_client.set_auth_token("tok-1")

    response = asyncio.run(AuthRepository(fake_client, TokenManager(fake_client)).refresh_token())
    assert response.token_type == "bearer"
    assert fake_client.auth_token == "tok-2"


def test_profile_and_health(fake_client):
    fake_client.routes["/api/v1/auth/me"] = {"username": "alice", "email": "a@example.com", "roles": ["x"]}
    fake_client.routes["/health"] = {"status": "healthy", "service": "fks_auth", "port": 8009}
    repo = AuthRepository(fake_client, TokenManager(fake_client))

    profile = asyncio.run(repo.get_profile())
    health = asyncio.run(repo.get_health())
    assert profile.username == "alice"
    assert profile.is_active
    assert health.port == 8009
    assert all(call[2] == fake_client.auth_url for call in fake_client.calls)


# ---------------- Data ----------------

def test_get_price_params(fake_client):
    fake_client.routes["/api/v1/data/price"] = PRICE
    repo = DataRepository(fake_client)

    asyncio.run(repo.get_price("BTC/USD"))
    asyncio.run(repo.get_price("ETH/USD", provider="kraken", use_cache=False))

    first, second = fake_client.calls
    assert first[2] == fake_client.data_url
    assert first[3] == {"symbol": "BTC/USD", "use_cache": "true"}
    assert second[3] == {"symbol": "ETH/USD", "provider": "kraken", "use_cache": "false"}


def test_btc_candle_shortcuts(fake_client):
    fake_client.routes["/api/v1/data/ohlcv"] = lambda params: {
        "symbol": params["symbol"], "interval": params["interval"], "data": [], "provider": "binance"
    }
    repo = DataRepository(fake_client)

    hourly = asyncio.run(repo.get_btc_hourly_candles())
    daily = asyncio.run(repo.get_btc_daily_candles())
    assert (hourly.symbol, hourly.interval) == ("BTC/USD", "1h")
    assert daily.interval == "1d"
    assert daily.data == []
    assert daily.to_dataframe().empty


# ---------------- Portfolio ----------------

def test_btc_price_placeholder_when_empty(fake_client):
    fake_client.routes["/api/assets/prices"] = []

    price = asyncio.run(PortfolioRepository(fake_client).get_btc_price())
    assert price == AssetPriceResponse(symbol="BTC", price_usd=0.0, price_btc=1.0)
    assert fake_client.calls[0][3] == {"symbols": "BTC"}


def test_btc_price_first_row(fake_client):
    fake_client.routes["/api/assets/prices"] = [
        {"symbol": "BTC", "price_usd": 43000.0, "price_btc": 1.0, "change_24h": 2.5},
        {"symbol": "BTC2", "price_usd": 1.0},
    ]

    price = asyncio.run(PortfolioRepository(fake_client).get_btc_price())
    assert price.price_usd == 43000.0
    assert price.change_24h == 2.5


def test_asset_prices_pass_empty_list_through(fake_client):
    fake_client.routes["/api/assets/prices"] = []
    prices = asyncio.run(PortfolioRepository(fake_client).get_asset_prices())
    assert prices == []
    assert fake_client.calls[0][3] is None


def test_rebalancing_plan(fake_client):
    fake_client.routes["/api/portfolio/rebalancing"] = {
        "target_btc_allocation": 0.5,
        "current_btc_allocation": 0.5,
        "actions": [],
    }

    plan = asyncio.run(PortfolioRepository(fake_client).get_rebalancing_plan(0.5))
    assert plan.actions == []
    assert fake_client.calls[0][3] == {"target_btc_allocation": "0.5"}
    assert fake_client.calls[0][2] == fake_client.portfolio_url


# ---------------- Signals ----------------

def test_generate_signals_params(fake_client, make_signal):
    fake_client.routes["/api/signals/generate"] = [make_signal()]
    repo = SignalRepository(fake_client)

    asyncio.run(repo.generate_signals())
    asyncio.run(repo.get_bitcoin_signals())

    first, second = fake_client.calls
    assert first[3] == {"category": "swing", "ai_enhanced": "false"}
    assert second[3] == {"category": "bitcoin", "symbols": "BTC/USD,BTC/USDT", "ai_enhanced": "true"}


def test_local_filters_do_not_refetch(fake_client, make_signal):
    fake_client.routes["/api/signals/generate"] = [
        make_signal("A", strength="strong", confidence=0.95),
        make_signal("B", strength="Strong", confidence=0.6),
        make_signal("C", strength="weak", confidence=0.8),
    ]
    repo = SignalRepository(fake_client)
    asyncio.run(repo.generate_signals())

    assert [s.symbol for s in repo.get_strong_signals()] == ["A", "B"]
    assert [s.symbol for s in repo.get_high_confidence_signals()] == ["A", "C"]
    assert [s.symbol for s in repo.get_high_confidence_signals(0.9)] == ["A"]
    assert len(fake_client.calls) == 1


def test_signal_stream_uses_portfolio_service(fake_client):
    fake_client.ws_messages = ["one", "two"]
    repo = SignalRepository(fake_client)

    async def collect():
        return [m async for m in repo.connect_signal_stream()]

    assert asyncio.run(collect()) == ["one", "two"]
    assert fake_client.calls[0][:3] == ("WS", "/api/signals/stream", fake_client.portfolio_url)


def test_logout_after_close_keeps_client_closed(fake_client):
    fake_client.routes["/api/v1/auth/logout"] = {}
    fake_client.set_auth_token("tok-1")
    asyncio.run(fake_client.close())

    asyncio.run(AuthRepository(fake_client, TokenManager(fake_client)).logout())
    assert fake_client.closed
    assert fake_client.auth_token is None
