from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from hitlog_app.schemas.hit import HitStats
from hitlog_app.storage.strategies import HitStorageStrategy


class StatsAggregator:
    """
    Global summary counts over all hits (filters never apply).
    
    Nothing is cached: two calls moments apart may differ.
    """
    
    def __init__(self, storage: HitStorageStrategy, timezone_name: str = "UTC"):
        """
        Args:
            storage: Hit storage gateway
            timezone_name: IANA zone whose calendar day counts as "today"
        """
        self.storage = storage
        self.tz = ZoneInfo(timezone_name)

    def today_bounds(self, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """Return [midnight, next midnight) of the current local day, in UTC"""
        local_now = (now or datetime.now(timezone.utc)).astimezone(self.tz)
        start = datetime(local_now.year, local_now.month, local_now.day, tzinfo=self.tz)
        end = start + timedelta(days=1)
        return start.astimezone(timezone.utc), end.astimezone(timezone.utc)

    def compute(self, now: Optional[datetime] = None) -> HitStats:
        start, end = self.today_bounds(now)
        return HitStats(
            total_hits=self.storage.count_hits(),
            unique_ips=self.storage.count_distinct("ip"),
            today_hits=self.storage.count_hits(start=start, end=end),
            hosts_count=self.storage.count_distinct("host"),
        )
