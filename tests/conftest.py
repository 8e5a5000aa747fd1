import sys
from pathlib import Path

# Ensure project root on sys.path before importing the package
sys.path.append(str(Path(__file__).resolve().parents[1]))

import pytest

from fks_client.core.api_client import (
    DEFAULT_API_URL, DEFAULT_AUTH_URL, DEFAULT_DATA_URL, DEFAULT_PORTFOLIO_URL
)


class FakeApiClient:
    """In-memory stand-in for FksApiClient.

    ``routes`` maps an endpoint to the payload to return: a plain JSON value,
    an exception instance to raise, or a callable receiving the params/body.
    """

    def __init__(self, routes=None):
        self.api_url = DEFAULT_API_URL
        self.auth_url = DEFAULT_AUTH_URL
        self.data_url = DEFAULT_DATA_URL
        self.portfolio_url = DEFAULT_PORTFOLIO_URL
        self.routes = dict(routes or {})
        self.calls = []
        self.ws_messages = []
        self._auth_token = None
        self.closed = False

    @property
    def auth_token(self):
        return self._auth_token

    def set_auth_token(self, token):
        self._auth_token = token

    def clear_auth_token(self):
        self._auth_token = None

    def is_authenticated(self):
        return self._auth_token is not None

    def endpoints(self):
        return [call[1] for call in self.calls]

    async def _respond(self, method, endpoint, base_url, params=None, body=None, decoder=None):
        self.calls.append((method, endpoint, base_url or self.api_url, params, body))
        if endpoint not in self.routes:
            raise AssertionError(f"Unexpected request: {method} {endpoint}")
        payload = self.routes[endpoint]
        if isinstance(payload, Exception):
            raise payload
        if callable(payload):
            payload = payload(params if method == "GET" else body)
        return decoder(payload) if decoder else payload

    async def get(self, endpoint, base_url=None, params=None, decoder=None):
        return await self._respond("GET", endpoint, base_url, params=params, decoder=decoder)

    async def post(self, endpoint, body=None, base_url=None, decoder=None):
        return await self._respond("POST", endpoint, base_url, body=body, decoder=decoder)

    async def put(self, endpoint, body=None, base_url=None, decoder=None):
        return await self._respond("PUT", endpoint, base_url, body=body, decoder=decoder)

    async def delete(self, endpoint, base_url=None, decoder=None):
        return await self._respond("DELETE", endpoint, base_url, decoder=decoder)

    async def close(self):
        self.closed = True

    async def connect_websocket(self, endpoint, base_url=None):
        self.calls.append(("WS", endpoint, base_url or self.api_url, None, None))
        for message in self.ws_messages:
            yield message


def signal_payload(symbol="BTC/USD", signal_type="BUY", strength="strong", confidence=0.9, **overrides):
    payload = {
        "symbol": symbol,
        "signal_type": signal_type,
        "category": "swing",
        "entry_price": 100.0,
        "take_profit": 110.0,
        "stop_loss": 95.0,
        "take_profit_pct": 10.0,
        "stop_loss_pct": 5.0,
        "risk_reward_ratio": 2.0,
        "position_size_pct": 1.5,
        "strength": strength,
        "confidence": confidence,
        "timestamp": "2024-01-10T15:00:00Z",
        "is_valid": True,
        "metadata": {"source": "test"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def fake_client():
    return FakeApiClient()


@pytest.fixture
def make_signal():
    return signal_payload
