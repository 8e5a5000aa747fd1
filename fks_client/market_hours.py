"""
Exchange session hours and world clocks for the trading wall
"""
from dataclasses import dataclass
from datetime import datetime, time, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo

from .models import WorldClock


@dataclass(frozen=True)
class MarketCenter:
    """Regular session of a trading centre, in local exchange time"""
    city: str
    timezone: str
    open: time
    close: time
    pre_open: time

    def local_time(self, now: datetime) -> datetime:
        return now.astimezone(ZoneInfo(self.timezone))


MARKET_CENTERS = (
    MarketCenter("Sydney", "Australia/Sydney", time(10, 0), time(16, 0), time(7, 0)),
    MarketCenter("Tokyo", "Asia/Tokyo", time(9, 0), time(15, 30), time(8, 0)),
    MarketCenter("Hong Kong", "Asia/Hong_Kong", time(9, 30), time(16, 0), time(9, 0)),
    MarketCenter("London", "Europe/London", time(8, 0), time(16, 30), time(7, 0)),
    MarketCenter("Frankfurt", "Europe/Berlin", time(9, 0), time(17, 30), time(8, 0)),
    MarketCenter("New York", "America/New_York", time(9, 30), time(16, 0), time(4, 0)),
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_market_open(center: MarketCenter, now: datetime) -> bool:
    local = center.local_time(now)
    if local.weekday() >= 5:
        return False
    return center.open <= local.time() < center.close


def is_pre_market(center: MarketCenter, now: datetime) -> bool:
    local = center.local_time(now)
    if local.weekday() >= 5:
        return False
    return center.pre_open <= local.time() < center.open


def is_overlap(center: MarketCenter, now: datetime) -> bool:
    """Open while at least one other centre is open too"""
    if not is_market_open(center, now):
        return False
    return any(is_market_open(other, now) for other in MARKET_CENTERS if other is not center)


def build_world_clocks(now: Optional[datetime] = None) -> List[WorldClock]:
    """Clock and session flags for every major trading centre"""
    now = now or _utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    return [
        WorldClock(
            city=center.city,
            timezone=center.timezone,
            time=center.local_time(now).strftime("%H:%M"),
            is_open=is_market_open(center, now),
            is_pre_market=is_pre_market(center, now),
            is_overlap=is_overlap(center, now),
        )
        for center in MARKET_CENTERS
    ]
