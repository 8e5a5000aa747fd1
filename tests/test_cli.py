import asyncio

import pytest
from rich.console import Console

from fks_client import cli
from fks_client.config.loader import ENV_OVERRIDES
from fks_client.core.errors import ApiError, NetworkError
from fks_client.services import FksServices

PRICE = {"symbol": "BTC/USD", "price": 42000.0, "timestamp": 1700000000, "provider": "binance"}


@pytest.fixture
def run_cli(fake_client, monkeypatch, tmp_path):
    for var in list(ENV_OVERRIDES) + ["FKS_USERNAME", "FKS_PASSWORD"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "setup_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(cli, "console", Console(width=200))
    monkeypatch.setattr(cli.FksServices, "from_config", lambda config: FksServices(fake_client, config))

    def run(*argv):
        return asyncio.run(cli.main(["--config", str(tmp_path / "client.yaml"), *argv]))

    return run


def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_price_command(run_cli, fake_client, capsys):
    fake_client.routes["/api/v1/data/price"] = PRICE

    assert run_cli("price", "BTC/USD", "--no-cache") == 0
    assert "BTC/USD: 42,000.0000 via binance" in capsys.readouterr().out
    assert fake_client.calls[0][3]["use_cache"] == "false"
    assert fake_client.closed


def test_failed_command_exits_with_one(run_cli, fake_client):
    fake_client.routes["/api/v1/data/price"] = NetworkError("connection refused")
    assert run_cli("price", "BTC/USD") == 1


def test_health_reports_every_service(run_cli, fake_client, capsys):
    fake_client.routes["/health"] = {"status": "healthy"}
    assert run_cli("health") == 0
    assert [c[2] for c in fake_client.calls] == [
        fake_client.auth_url, fake_client.data_url, fake_client.portfolio_url
    ]


def test_rejected_login_stops_before_command(run_cli, fake_client):
    fake_client.routes["/api/v1/auth/login"] = ApiError(401, "Invalid credentials")

    assert run_cli("--username", "alice", "--password", "wrong", "signals") == 1
    assert fake_client.endpoints() == ["/api/v1/auth/login"]


def test_signals_with_login(run_cli, fake_client, make_signal, capsys):
    fake_client.routes.update({
        "/api/v1/auth/login": {"access_token": "tok-1", "expires_in": 3600},
        "/api/v1/auth/me": {"username": "alice"},
        "/api/v1/auth/logout": {},
        "/api/signals/generate": [make_signal("ETH/USD", "SELL")],
        "/api/signals/summary": {"total_signals": 1, "by_category": {}, "by_strength": {},
                                 "timestamp": "2024-01-10T15:00:00Z"},
    })

    assert run_cli("--username", "alice", "--password", "secret", "signals", "--category", "day") == 0
    out = capsys.readouterr().out
    assert "Logged in as alice" in out
    assert "ETH/USD" in out
    assert fake_client.endpoints()[-1] == "/api/v1/auth/logout"
    assert fake_client.auth_token is None


def test_unknown_signal_category_is_rejected():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["signals", "--category", "lottery"])
    args = cli.build_parser().parse_args(["signals", "--category", "bitcoin"])
    assert args.category == "bitcoin"


def test_command_failure_is_logged_by_cli_logger(run_cli, fake_client, caplog):
    fake_client.routes["/api/v1/data/price"] = NetworkError("connection refused")

    with caplog.at_level("ERROR", logger="fks_client.cli"):
        assert run_cli("price", "BTC/USD") == 1
    assert any(r.name == "fks_client.cli" and "Command price failed" in r.getMessage()
               for r in caplog.records)
