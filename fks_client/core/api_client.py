"""
Shared HTTP/WebSocket client for the FKS backend services
"""
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, Optional
from urllib.parse import urlencode

import aiohttp
import websockets
from aiolimiter import AsyncLimiter

from .errors import ApiError, DecodeError, NetworkError, WebSocketError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8001"
DEFAULT_DATA_URL = "http://localhost:8003"
DEFAULT_AUTH_URL = "http://localhost:8009"
DEFAULT_PORTFOLIO_URL = "http://localhost:8012"

Decoder = Callable[[Any], Any]


def build_url(base_url: str, endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Join base URL and endpoint, appending URL-encoded query parameters"""
    if not endpoint.startswith("/"):
        endpoint = "/" + endpoint
    url = f"{base_url}{endpoint}"
    if params:
        url += "?" + urlencode({k: str(v) for k, v in params.items()})
    return url


def to_websocket_url(url: str) -> str:
    """Rewrite an http(s) URL to its ws(s) counterpart"""
    if url.startswith("https://"):
        return "wss://" + url[len("https://"):]
    if url.startswith("http://"):
        return "ws://" + url[len("http://"):]
    return url


class FksApiClient:
    """HTTP + WebSocket client shared by all repositories.

    Holds the base URLs of the four backend services and a single bearer
    token. Every request made through the client sees the same token.
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        auth_url: str = DEFAULT_AUTH_URL,
        data_url: str = DEFAULT_DATA_URL,
        portfolio_url: str = DEFAULT_PORTFOLIO_URL,
        requests_per_minute: Optional[int] = None,
        request_timeout: Optional[float] = None,
    ):
        self.api_url = api_url
        self.auth_url = auth_url
        self.data_url = data_url
        self.portfolio_url = portfolio_url

        self._auth_token: Optional[str] = None

        # Optional client-side throttle
        self.limiter = AsyncLimiter(max_rate=requests_per_minute, time_period=60) if requests_per_minute else None
        self.request_timeout = request_timeout

        # HTTP session
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        if not self.session or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout) if self.request_timeout else None
            if timeout:
                self.session = aiohttp.ClientSession(timeout=timeout)
            else:
                self.session = aiohttp.ClientSession()

    async def close(self):
        if self.session:
            await self.session.close()
            self.session = None

    def configure(
        self,
        api_url: Optional[str] = None,
        auth_url: Optional[str] = None,
        data_url: Optional[str] = None,
        portfolio_url: Optional[str] = None,
    ):
        """Overwrite the given base URLs; arguments left as None keep their value"""
        if api_url is not None:
            self.api_url = api_url
        if auth_url is not None:
            self.auth_url = auth_url
        if data_url is not None:
            self.data_url = data_url
        if portfolio_url is not None:
            self.portfolio_url = portfolio_url

    # ---------------- Credentials ----------------

    @property
    def auth_token(self) -> Optional[str]:
        return self._auth_token

    def set_auth_token(self, token: str):
        self._auth_token = token

    def clear_auth_token(self):
        self._auth_token = None

    def is_authenticated(self) -> bool:
        return self._auth_token is not None

    def _headers(self, with_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if with_body:
            headers["Content-Type"] = "application/json"
        if self._auth_token is not None:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return headers

    # ---------------- HTTP ----------------

    async def get(self, endpoint: str, base_url: Optional[str] = None,
                  params: Optional[Dict[str, Any]] = None, decoder: Optional[Decoder] = None) -> Any:
        return await self._request("GET", endpoint, base_url, params=params, decoder=decoder)

    async def post(self, endpoint: str, body: Any = None, base_url: Optional[str] = None,
                   decoder: Optional[Decoder] = None) -> Any:
        return await self._request("POST", endpoint, base_url, body=body, decoder=decoder)

    async def put(self, endpoint: str, body: Any = None, base_url: Optional[str] = None,
                  decoder: Optional[Decoder] = None) -> Any:
        return await self._request("PUT", endpoint, base_url, body=body, decoder=decoder)

    async def delete(self, endpoint: str, base_url: Optional[str] = None,
                     decoder: Optional[Decoder] = None) -> Any:
        return await self._request("DELETE", endpoint, base_url, decoder=decoder)

    async def _request(self, method: str, endpoint: str, base_url: Optional[str] = None,
                       params: Optional[Dict[str, Any]] = None, body: Any = None,
                       decoder: Optional[Decoder] = None) -> Any:
        await self._ensure_session()
        url = build_url(base_url or self.api_url, endpoint, params)

        kwargs: Dict[str, Any] = {"headers": self._headers(with_body=method in ("POST", "PUT"))}
        if method in ("POST", "PUT"):
            kwargs["data"] = json.dumps(_encode_body(body))

        if self.limiter:
            async with self.limiter:
                payload = await self._send(method, url, kwargs)
        else:
            payload = await self._send(method, url, kwargs)

        if decoder is None:
            return payload
        try:
            return decoder(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"Unexpected response shape from {method} {url}: {e}") from e

    async def _send(self, method: str, url: str, kwargs: Dict[str, Any]) -> Any:
        logger.debug(f"{method} {url}")
        try:
            async with self.session.request(method, url, **kwargs) as response:
                raw = await response.read()
                if not 200 <= response.status < 300:
                    text = raw.decode("utf-8", errors="replace")
                    logger.debug(f"{method} {url} failed: {response.status} - {text[:200]}")
                    raise ApiError(response.status, text[:500], url)
        except asyncio.TimeoutError as e:
            raise NetworkError(f"{method} {url} timed out") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e

        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(f"Invalid JSON from {method} {url}: {e}") from e

    # ---------------- WebSocket ----------------

    async def connect_websocket(self, endpoint: str, base_url: Optional[str] = None) -> AsyncIterator[str]:
        """Yield text frames from a WebSocket until the server closes it.

        The stream is not restarted; callers reconnect themselves if they
        want to.
        """
        url = build_url(to_websocket_url(base_url or self.api_url), endpoint)
        headers = {}
        if self._auth_token is not None:
            headers["Authorization"] = f"Bearer {self._auth_token}"

        try:
            async with websockets.connect(url, additional_headers=headers) as connection:
                logger.info(f"WebSocket connected: {url}")
                async for message in connection:
                    if isinstance(message, str):
                        yield message
        except websockets.exceptions.ConnectionClosedError as e:
            raise WebSocketError(f"WebSocket {url} closed with error: {e}") from e
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
            raise WebSocketError(f"WebSocket {url} failed: {e}") from e
        logger.info(f"WebSocket closed: {url}")


def _encode_body(body: Any) -> Any:
    if body is None:
        return {}
    if hasattr(body, "to_dict"):
        return body.to_dict()
    return body
