from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional, Union
from datetime import datetime, timezone

MAX_FIELD_LENGTH = 500
DEFAULT_USER_AGENT = "Unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HitCreate(BaseModel):
    """
    A normalized hit, ready to be inserted.

    Free-text fields are truncated to MAX_FIELD_LENGTH characters.
    """
    ip: str = Field(..., min_length=1, description="Resolved client address")
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header")
    referer: str = Field("", description="Referer header")
    host: str = Field("", description="Host header at ingestion time")
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("user_agent", "referer")
    @classmethod
    def truncate(cls, value: str) -> str:
        return value[:MAX_FIELD_LENGTH]


class HitRow(BaseModel):
    """Read copy of a stored hit (serializes the SQLAlchemy model)"""
    id: int
    ip: str
    user_agent: str
    referer: str
    host: str
    created_at: datetime

    @field_validator("ip", mode="before")
    @classmethod
    def ip_as_text(cls, value) -> str:
        # PostgreSQL drivers may hand back ipaddress objects for INET
        return str(value)

    # Pydantic V2 style configuration
    model_config = ConfigDict(from_attributes=True)


class HitPage(BaseModel):
    """One page of hits plus the filtered total (ignoring pagination)"""
    hits: List[HitRow]
    total_count: int


class HitStats(BaseModel):
    total_hits: int
    unique_ips: int
    today_hits: int
    hosts_count: int


class HealthStatus(BaseModel):
    status: str  # "ok" | "error"
    storage: str  # "connected" | "disconnected"

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class HealthResponse(BaseModel):
    """Body of the /health endpoint"""
    status: str  # "healthy" | "unhealthy"
    version: str
    database: str
    timestamp: str


class SystemInfo(BaseModel):
    version: str
    python_version: str
    fastapi_version: str
    environment: str
    database_status: str
    uptime: str
    memory_usage: Union[int, str]
    os_version: str
    database_version: str


class AdminReport(BaseModel):
    """Everything the admin template needs, already computed"""
    hits: List[HitRow]
    stats: HitStats
    page: int
    per_page: int
    total_count: int
    total_pages: int
    hosts: List[str]
    ip_filter: Optional[str] = None
    host_filter: Optional[str] = None
    system_info: SystemInfo

    @property
    def is_empty(self) -> bool:
        return self.total_count == 0
