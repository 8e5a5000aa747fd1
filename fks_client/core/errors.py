"""
Error taxonomy for the FKS API client
"""
from typing import Optional


class FksClientError(Exception):
    """Base class for every failure raised by the client layer"""


class NetworkError(FksClientError):
    """Transport failure: connection refused, timeout, socket error"""


class ApiError(FksClientError):
    """Server answered with a non-2xx status"""

    def __init__(self, status: int, message: str = "", url: Optional[str] = None):
        self.status = status
        self.message = message
        self.url = url
        detail = f": {message}" if message else ""
        super().__init__(f"HTTP {status}{detail}")

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401


class DecodeError(FksClientError):
    """Response body is not JSON or does not match the expected shape"""


class WebSocketError(FksClientError):
    """WebSocket connection failed or closed abnormally"""
