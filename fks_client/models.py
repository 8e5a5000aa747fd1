"""
Data models mirroring the FKS backend JSON payloads
"""
import time
from dataclasses import asdict, dataclass, field, fields
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar, Union, get_args, get_origin, get_type_hints

import pandas as pd

M = TypeVar("M", bound="JsonModel")

NoneType = type(None)


@lru_cache(maxsize=None)
def _field_types(cls) -> Dict[str, Tuple[Any, bool]]:
    """Field name -> (annotation without Optional, whether None is allowed)"""
    hints = get_type_hints(cls)
    result = {}
    for f in fields(cls):
        annotation = hints[f.name]
        optional = False
        if get_origin(annotation) is Union:
            args = [a for a in get_args(annotation) if a is not NoneType]
            optional = len(args) < len(get_args(annotation))
            annotation = args[0] if len(args) == 1 else Any
        result[f.name] = (annotation, optional)
    return result


def _coerce(name: str, annotation: Any, optional: bool, value: Any) -> Any:
    if value is None:
        if optional:
            return None
        raise TypeError(f"{name} must not be null")
    if annotation is bool:
        if not isinstance(value, bool):
            raise TypeError(f"{name} must be a boolean, got {value!r}")
    elif annotation in (int, float):
        if isinstance(value, bool):
            raise TypeError(f"{name} must be a number, got {value!r}")
        return annotation(value)
    elif annotation is str:
        if not isinstance(value, str):
            raise TypeError(f"{name} must be a string, got {value!r}")
    return value


class JsonModel:
    """Decoding helpers shared by every record.

    Unknown keys in the payload are ignored. Scalar fields are checked
    against their annotations: numbers (numeric strings too) are converted,
    anything else raises ``TypeError``/``ValueError``, as do null values for
    non-Optional fields and missing required keys.
    """

    @classmethod
    def from_dict(cls: Type[M], data: Dict[str, Any]) -> M:
        if not isinstance(data, dict):
            raise TypeError(f"Expected JSON object for {cls.__name__}, got {type(data).__name__}")
        values = {}
        for name, (annotation, optional) in _field_types(cls).items():
            if name in data:
                values[name] = _coerce(name, annotation, optional, data[name])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def list_of(model: Type[M]) -> Callable[[Any], List[M]]:
    """Build a decoder for a JSON array of ``model`` records"""
    def decode(payload: Any) -> List[M]:
        if not isinstance(payload, list):
            raise TypeError(f"Expected JSON array of {model.__name__}, got {type(payload).__name__}")
        return [model.from_dict(item) for item in payload]
    return decode


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ==================== Authentication ====================

@dataclass(frozen=True)
class LoginRequest(JsonModel):
    username: str
    password: str


@dataclass(frozen=True)
class TokenResponse(JsonModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None


@dataclass(frozen=True)
class UserProfile(JsonModel):
    username: str
    id: Optional[str] = None
    email: Optional[str] = None
    is_active: bool = True


# ==================== Market data ====================

@dataclass(frozen=True)
class PriceResponse(JsonModel):
    symbol: str
    price: float
    timestamp: int
    provider: str
    cached: bool = False


@dataclass(frozen=True)
class OHLCVDataPoint(JsonModel):
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float


@dataclass(frozen=True)
class OHLCVResponse(JsonModel):
    symbol: str
    interval: str
    data: List[OHLCVDataPoint]
    provider: str
    cached: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OHLCVResponse":
        response = super().from_dict(data)
        points = [OHLCVDataPoint.from_dict(point) for point in response.data]
        return cls(
            symbol=response.symbol,
            interval=response.interval,
            data=points,
            provider=response.provider,
            cached=response.cached,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Candles as a DataFrame, rows in the order the server sent them"""
        columns = ['timestamp', 'open', 'high', 'low', 'close', 'volume']
        if not self.data:
            return pd.DataFrame(columns=columns)
        return pd.DataFrame([point.to_dict() for point in self.data], columns=columns)


# ==================== Signals ====================

@dataclass(frozen=True)
class SignalResponse(JsonModel):
    symbol: str
    signal_type: str  # 'BUY' / 'SELL' / 'HOLD'
    category: str
    entry_price: float
    take_profit: float
    stop_loss: float
    take_profit_pct: float
    stop_loss_pct: float
    risk_reward_ratio: float
    position_size_pct: float
    strength: str  # 'weak' / 'moderate' / 'strong'
    confidence: float  # 0.0 - 1.0, not clamped
    timestamp: str
    is_valid: bool
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SignalSummaryResponse(JsonModel):
    total_signals: int
    by_category: Dict[str, int]
    by_strength: Dict[str, int]
    timestamp: str


# ==================== Portfolio ====================

@dataclass(frozen=True)
class PortfolioValueResponse(JsonModel):
    total_btc: float
    holdings_btc: Dict[str, float]
    btc_allocation: float
    timestamp: str
    total_usd: Optional[float] = None


@dataclass(frozen=True)
class AssetPriceResponse(JsonModel):
    symbol: str
    price_usd: Optional[float] = None
    price_btc: Optional[float] = None
    change_24h: Optional[float] = None
    market_cap: Optional[float] = None


@dataclass(frozen=True)
class CorrelationResponse(JsonModel):
    symbol: str
    correlation_to_btc: float
    timeframe: Optional[str] = None


@dataclass(frozen=True)
class RebalancingAction(JsonModel):
    symbol: str
    action: str  # 'buy' / 'sell'
    amount: float
    current_amount: float


@dataclass(frozen=True)
class RebalancingPlanResponse(JsonModel):
    target_btc_allocation: float
    current_btc_allocation: float
    actions: List[RebalancingAction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RebalancingPlanResponse":
        plan = super().from_dict(data)
        return cls(
            target_btc_allocation=plan.target_btc_allocation,
            current_btc_allocation=plan.current_btc_allocation,
            actions=[RebalancingAction.from_dict(a) for a in plan.actions],
        )


# ==================== Health ====================

@dataclass(frozen=True)
class HealthResponse(JsonModel):
    status: str
    service: Optional[str] = None
    version: Optional[str] = None
    port: Optional[int] = None


# ==================== Tasks (gamification) ====================

@dataclass(frozen=True)
class Task(JsonModel):
    id: str
    title: str
    description: Optional[str] = None
    xp: int = 10
    completed: bool = False
    category: str = "daily"
    deadline: Optional[str] = None


@dataclass(frozen=True)
class UserProgress(JsonModel):
    current_xp: int = 0
    level: int = 1
    streak: int = 0
    hardware_wallet_progress: float = 0.0
    completed_tasks: List[str] = field(default_factory=list)


# ==================== Trading wall ====================

@dataclass(frozen=True)
class SignalGenerationMetrics(JsonModel):
    total: int = 0
    by_timeframe_strategy: Dict[str, int] = field(default_factory=dict)
    avg_times: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class CacheMetrics(JsonModel):
    hits: Dict[str, int] = field(default_factory=dict)
    misses: Dict[str, int] = field(default_factory=dict)
    total_operations: Dict[str, int] = field(default_factory=dict)
    hit_rates: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ProcessingMetrics(JsonModel):
    parallel_count: int = 0
    async_count: int = 0


@dataclass(frozen=True)
class ConfluenceMetrics(JsonModel):
    detections: int = 0


@dataclass(frozen=True)
class TimeframeMetricsResponse(JsonModel):
    timestamp: Optional[str] = None
    signal_generation: Optional[SignalGenerationMetrics] = None
    cache: Optional[CacheMetrics] = None
    processing: Optional[ProcessingMetrics] = None
    confluence: Optional[ConfluenceMetrics] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeframeMetricsResponse":
        if not isinstance(data, dict):
            raise TypeError(f"Expected JSON object for {cls.__name__}, got {type(data).__name__}")

        def nested(key: str, model):
            block = data.get(key)
            return model.from_dict(block) if isinstance(block, dict) else None

        timestamp = data.get("timestamp")
        return cls(
            timestamp=str(timestamp) if timestamp is not None else None,
            signal_generation=nested("signal_generation", SignalGenerationMetrics),
            cache=nested("cache", CacheMetrics),
            processing=nested("processing", ProcessingMetrics),
            confluence=nested("confluence", ConfluenceMetrics),
        )


@dataclass(frozen=True)
class PortfolioMetricsResponse(JsonModel):
    pnl: Optional[float] = None
    exposure: Optional[float] = None
    risk: Optional[float] = None
    timestamp: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PortfolioMetricsResponse":
        if not isinstance(data, dict):
            raise TypeError(f"Expected JSON object for {cls.__name__}, got {type(data).__name__}")
        timestamp = data.get("timestamp")
        return cls(
            pnl=_optional_float(data.get("pnl")),
            exposure=_optional_float(data.get("exposure")),
            risk=_optional_float(data.get("risk")),
            timestamp=str(timestamp) if timestamp is not None else None,
        )


@dataclass(frozen=True)
class TickerPrice(JsonModel):
    symbol: str
    price: float
    change: Optional[float] = None
    change_percent: Optional[float] = None
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))


@dataclass(frozen=True)
class WorldClock(JsonModel):
    city: str
    timezone: str
    time: str
    is_open: bool
    is_pre_market: bool
    is_overlap: bool
