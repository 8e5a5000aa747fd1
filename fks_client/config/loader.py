"""
Configuration loader: YAML file, then .env and FKS_* environment overrides
"""
import logging
import os
from dataclasses import asdict, fields
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv

from .models import ClientConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/client.yaml"

ENV_OVERRIDES = {
    "FKS_API_URL": "api_url",
    "FKS_AUTH_URL": "auth_url",
    "FKS_DATA_URL": "data_url",
    "FKS_PORTFOLIO_URL": "portfolio_url",
    "FKS_LOG_LEVEL": "log_level",
}


class ConfigLoader:
    """Loads and saves client configuration from YAML files"""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH, env_file: Optional[str] = ".env"):
        self.config_path = Path(config_path)
        self.env_file = env_file

    def load(self) -> ClientConfig:
        """Load configuration; environment variables win over the file"""
        config = self._load_file()

        if self.env_file:
            load_dotenv(self.env_file, override=False)
        overrides = self._env_overrides()
        if overrides:
            logger.info(f"Applying environment overrides: {sorted(overrides)}")
            for key, value in overrides.items():
                setattr(config, key, value)
            config.log_level = config.log_level.upper()

        errors = config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {errors}")
        return config

    def _load_file(self) -> ClientConfig:
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            return ClientConfig()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)

            if not data:
                logger.warning("Empty config file, using defaults")
                return ClientConfig()
            if not isinstance(data, dict):
                raise ValueError(f"Expected a mapping at the top level, got {type(data).__name__}")

            known = {f.name for f in fields(ClientConfig)}
            unknown = set(data) - known
            if unknown:
                logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")

            config = ClientConfig(**{k: v for k, v in data.items() if k in known})
            errors = config.validate()
            if errors:
                raise ValueError(f"Configuration validation failed: {errors}")

            logger.info(f"Loaded configuration from {self.config_path}")
            return config

        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            logger.info("Using default configuration")
            return ClientConfig()

    @staticmethod
    def _env_overrides() -> Dict[str, str]:
        return {
            attr: os.environ[var]
            for var, attr in ENV_OVERRIDES.items()
            if os.environ.get(var)
        }

    def save(self, config: ClientConfig) -> bool:
        """Save configuration to YAML file"""
        errors = config.validate()
        if errors:
            logger.error(f"Cannot save invalid configuration: {errors}")
            return False

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(asdict(config), f, default_flow_style=False, sort_keys=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")
            return False

        logger.info(f"Configuration saved to {self.config_path}")
        return True


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> ClientConfig:
    """Convenience function to load configuration"""
    return ConfigLoader(config_path).load()


def save_config(config: ClientConfig, config_path: str = DEFAULT_CONFIG_PATH) -> bool:
    """Convenience function to save configuration"""
    return ConfigLoader(config_path).save(config)
