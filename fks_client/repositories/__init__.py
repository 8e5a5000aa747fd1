"""
Repositories: typed calls against each backend service
"""

from .auth import AuthRepository
from .data import DataRepository
from .portfolio import PortfolioRepository
from .signals import SIGNAL_CATEGORIES, SignalRepository

__all__ = [
    'AuthRepository', 'DataRepository', 'PortfolioRepository',
    'SignalRepository', 'SIGNAL_CATEGORIES'
]
