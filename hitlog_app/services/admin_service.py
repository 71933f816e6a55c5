import math
from typing import Optional

from hitlog_app.schemas.hit import AdminReport
from hitlog_app.services.stats_aggregator import StatsAggregator
from hitlog_app.services.system_info import SystemInfoCollector
from hitlog_app.storage.strategies import HitStorageStrategy

PER_PAGE = 50


def parse_page(raw) -> int:
    """Parse the ``page`` query value; anything invalid or below 1 means page 1"""
    try:
        page = int(str(raw).strip())
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


def clean_filter(raw: Optional[str]) -> Optional[str]:
    """Trim a filter value; blank means no filter"""
    if raw is None:
        return None
    value = raw.strip()
    return value or None


class AdminService:
    """
    Admin Query Engine: builds the report model for the admin panel.
    
    Authentication happens before this service is called (see
    hitlog_app.api.admin); rendering happens after it.
    """
    
    def __init__(
        self,
        storage: HitStorageStrategy,
        stats: StatsAggregator,
        system_info: SystemInfoCollector,
    ):
        self.storage = storage
        self.stats = stats
        self.system_info = system_info

    def build_report(
        self,
        page=None,
        ip_filter: Optional[str] = None,
        host_filter: Optional[str] = None,
    ) -> AdminReport:
        """
        Query one page of hits plus everything the panel shows around it.
        
        Args:
            page: Raw page value from the query string
            ip_filter: Raw ``ip`` query value (substring, case-insensitive)
            host_filter: Raw ``host`` query value (exact match)
            
        Returns:
            AdminReport ready for rendering
        """
        page = parse_page(page)
        ip_filter = clean_filter(ip_filter)
        host_filter = clean_filter(host_filter)

        result = self.storage.fetch_hits(
            limit=PER_PAGE,
            offset=(page - 1) * PER_PAGE,
            ip_filter=ip_filter,
            host_filter=host_filter,
        )
        total_pages = math.ceil(result.total_count / PER_PAGE)

        return AdminReport(
            hits=result.hits,
            stats=self.stats.compute(),
            page=page,
            per_page=PER_PAGE,
            total_count=result.total_count,
            total_pages=total_pages,
            hosts=self.storage.distinct_hosts(),
            ip_filter=ip_filter,
            host_filter=host_filter,
            system_info=self.system_info.collect(),
        )
