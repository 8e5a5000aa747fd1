"""
Configuration package for the FKS client
"""

from .loader import ConfigLoader, load_config, save_config
from .models import ClientConfig

__all__ = ['ClientConfig', 'ConfigLoader', 'load_config', 'save_config']
