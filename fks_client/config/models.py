"""
Configuration model for the FKS client
"""
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.api_client import DEFAULT_API_URL, DEFAULT_AUTH_URL, DEFAULT_DATA_URL, DEFAULT_PORTFOLIO_URL
from ..viewmodels.trading_wall import CLOCK_INTERVAL, METRICS_INTERVAL, TICKER_INTERVAL, TICKER_SYMBOLS
from ..viewmodels.websocket import SIGNAL_BUFFER_SIZE

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ClientConfig:
    """Main client configuration"""
    # Service base URLs
    api_url: str = DEFAULT_API_URL
    auth_url: str = DEFAULT_AUTH_URL
    data_url: str = DEFAULT_DATA_URL
    portfolio_url: str = DEFAULT_PORTFOLIO_URL

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # HTTP
    requests_per_minute: Optional[int] = None
    request_timeout: Optional[float] = None

    # Session
    token_refresh_minutes: int = 15

    # Trading wall
    ticker_symbols: List[str] = field(default_factory=lambda: list(TICKER_SYMBOLS))
    clock_interval: float = CLOCK_INTERVAL
    ticker_interval: float = TICKER_INTERVAL
    metrics_interval: float = METRICS_INTERVAL

    # Signal stream
    signal_buffer_size: int = SIGNAL_BUFFER_SIZE

    def __post_init__(self):
        self.log_level = str(self.log_level).upper()

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        for name in ("api_url", "auth_url", "data_url", "portfolio_url"):
            url = getattr(self, name)
            if not isinstance(url, str) or not url.startswith(("http://", "https://")):
                errors.append(f"Invalid {name}: {url!r}")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"Unknown log level: {self.log_level}")

        if self.requests_per_minute is not None and self.requests_per_minute <= 0:
            errors.append(f"requests_per_minute must be positive: {self.requests_per_minute}")
        if self.request_timeout is not None and self.request_timeout <= 0:
            errors.append(f"request_timeout must be positive: {self.request_timeout}")

        if self.token_refresh_minutes < 1:
            errors.append(f"token_refresh_minutes must be at least 1: {self.token_refresh_minutes}")

        for name in ("clock_interval", "ticker_interval", "metrics_interval"):
            if getattr(self, name) <= 0:
                errors.append(f"{name} must be positive: {getattr(self, name)}")

        if not self.ticker_symbols:
            errors.append("ticker_symbols must not be empty")
        if self.signal_buffer_size < 1:
            errors.append(f"signal_buffer_size must be at least 1: {self.signal_buffer_size}")

        return errors
