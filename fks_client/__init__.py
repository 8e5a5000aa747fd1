"""
FKS trading client: API client, session management, repositories and view-models
"""

from .core import (
    ApiError, DecodeError, FksApiClient, FksClientError,
    NetworkError, Observable, TokenManager, WebSocketError
)
from .services import FksServices

__version__ = "0.1.0"

__all__ = [
    'FksApiClient', 'TokenManager', 'Observable', 'FksServices',
    'FksClientError', 'NetworkError', 'ApiError', 'DecodeError', 'WebSocketError'
]
