"""
Core client modules: HTTP/WebSocket client, session state, errors
"""

from .api_client import FksApiClient, build_url, to_websocket_url
from .errors import ApiError, DecodeError, FksClientError, NetworkError, WebSocketError
from .observable import Observable
from .token_manager import TokenManager

__all__ = [
    'FksApiClient', 'build_url', 'to_websocket_url',
    'ApiError', 'DecodeError', 'FksClientError', 'NetworkError', 'WebSocketError',
    'Observable', 'TokenManager'
]
