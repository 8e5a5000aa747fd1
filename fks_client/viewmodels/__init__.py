"""
View-models: observable state plus orchestration of repository calls
"""

from .auth import AuthState, AuthViewModel
from .base import ViewModel
from .portfolio import PortfolioState, PortfolioViewModel
from .signals import SignalState, SignalViewModel
from .trading_wall import TICKER_SYMBOLS, TradingWallState, TradingWallViewModel
from .websocket import SIGNAL_BUFFER_SIZE, WebSocketState, WebSocketViewModel

__all__ = [
    'ViewModel',
    'AuthState', 'AuthViewModel',
    'PortfolioState', 'PortfolioViewModel',
    'SignalState', 'SignalViewModel',
    'TICKER_SYMBOLS', 'TradingWallState', 'TradingWallViewModel',
    'SIGNAL_BUFFER_SIZE', 'WebSocketState', 'WebSocketViewModel'
]
