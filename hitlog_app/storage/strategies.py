"""
Hit storage strategies using Strategy Pattern.

The storage gateway is the only component that touches persisted hits:
- SQLHitStorage: SQLAlchemy over PostgreSQL (production) or SQLite (development)
- InMemoryHitStorage: process-local list, for tests and demos
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
import threading

import structlog
from sqlalchemy import String, cast, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from hitlog_app.database.connection import build_session_factory, init_database
from hitlog_app.models.hit import Hit
from hitlog_app.schemas.hit import HitCreate, HitPage, HitRow

log = structlog.get_logger(__name__)

DISTINCT_COLUMNS = ("ip", "host")


class HitStorageStrategy(ABC):
    """
    Abstract base class for hit storage strategies.
    
    Services receive an instance through their constructor, so a fake
    gateway can be injected in tests.
    
    All methods are synchronous; errors surface as exceptions
    (SQLAlchemyError for the SQL backend) and are handled by callers.
    """
    
    @abstractmethod
    def initialize(self) -> None:
        """Create schema if needed. Must be idempotent."""
        pass
    
    @abstractmethod
    def insert_hit(self, hit: HitCreate) -> int:
        """
        Persist one hit.
        
        Args:
            hit: Normalized hit
            
        Returns:
            The storage-assigned id
        """
        pass
    
    @abstractmethod
    def fetch_hits(
        self,
        limit: int,
        offset: int,
        ip_filter: Optional[str] = None,
        host_filter: Optional[str] = None,
    ) -> HitPage:
        """
        Get one page of hits, newest first.
        
        Args:
            limit: Page size
            offset: Rows to skip
            ip_filter: Case-insensitive substring of the address text
            host_filter: Exact host value
            
        Returns:
            HitPage with the rows and the filtered total
        """
        pass
    
    @abstractmethod
    def distinct_hosts(self) -> List[str]:
        """Get every host seen so far, sorted"""
        pass
    
    @abstractmethod
    def count_hits(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """Count hits with start <= created_at < end (open bounds when None)"""
        pass
    
    @abstractmethod
    def count_distinct(self, column: str) -> int:
        """Count distinct values of ``ip`` or ``host``"""
        pass
    
    @abstractmethod
    def ping(self) -> None:
        """Raise if the storage is unreachable"""
        pass
    
    @abstractmethod
    def server_version(self) -> str:
        """Version string of the storage server"""
        pass
    
    def close(self) -> None:
        """Release resources (no-op by default)"""
        pass


class SQLHitStorage(HitStorageStrategy):
    """
    SQLAlchemy implementation for hit storage.
    
    One session per operation, taken from the engine's connection pool.
    Pool exhaustion surfaces as sqlalchemy.exc.TimeoutError, which callers
    treat like any other storage error.
    """
    
    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker] = None):
        """
        Initialize SQL hit storage.
        
        Args:
            engine: SQLAlchemy engine
            session_factory: Optional sessionmaker (built from engine if omitted)
        """
        self.engine = engine
        self.session_factory = session_factory or build_session_factory(engine)
    
    def initialize(self) -> None:
        init_database(self.engine)
    
    def insert_hit(self, hit: HitCreate) -> int:
        row = Hit(
            ip=hit.ip,
            user_agent=hit.user_agent,
            referer=hit.referer,
            host=hit.host,
            created_at=hit.created_at,
        )
        with self.session_factory() as session:
            session.add(row)
            session.commit()
            return row.id
    
    def _filtered(self, stmt, ip_filter: Optional[str], host_filter: Optional[str]):
        if ip_filter:
            stmt = stmt.where(cast(Hit.ip, String).icontains(ip_filter, autoescape=True))
        if host_filter:
            stmt = stmt.where(Hit.host == host_filter)
        return stmt
    
    def fetch_hits(
        self,
        limit: int,
        offset: int,
        ip_filter: Optional[str] = None,
        host_filter: Optional[str] = None,
    ) -> HitPage:
        rows_stmt = self._filtered(select(Hit), ip_filter, host_filter)
        rows_stmt = rows_stmt.order_by(Hit.created_at.desc(), Hit.id.desc()).limit(limit).offset(offset)
        count_stmt = self._filtered(select(func.count(Hit.id)), ip_filter, host_filter)
        
        with self.session_factory() as session:
            rows = session.scalars(rows_stmt).all()
            total = session.scalar(count_stmt)
            return HitPage(
                hits=[HitRow.model_validate(row) for row in rows],
                total_count=total or 0,
            )
    
    def distinct_hosts(self) -> List[str]:
        stmt = select(Hit.host).distinct().order_by(Hit.host)
        with self.session_factory() as session:
            return list(session.scalars(stmt).all())
    
    def count_hits(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        stmt = select(func.count(Hit.id))
        if start is not None:
            stmt = stmt.where(Hit.created_at >= start)
        if end is not None:
            stmt = stmt.where(Hit.created_at < end)
        with self.session_factory() as session:
            return session.scalar(stmt) or 0
    
    def count_distinct(self, column: str) -> int:
        if column not in DISTINCT_COLUMNS:
            raise ValueError(f"Cannot count distinct values of {column!r}")
        stmt = select(func.count(func.distinct(getattr(Hit, column))))
        with self.session_factory() as session:
            return session.scalar(stmt) or 0
    
    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    
    def server_version(self) -> str:
        with self.engine.connect() as conn:
            if self.engine.dialect.name == "postgresql":
                return conn.execute(text("SHOW server_version")).scalar_one()
            if self.engine.dialect.name == "sqlite":
                return "SQLite " + conn.execute(text("SELECT sqlite_version()")).scalar_one()
        info = self.engine.dialect.server_version_info or ()
        return ".".join(str(part) for part in info) or "n/a"
    
    def close(self) -> None:
        self.engine.dispose()


class InMemoryHitStorage(HitStorageStrategy):
    """
    In-memory hit storage (process-local).
    
    Pros:
    - No database needed
    - Perfect for tests and demos
    
    Cons:
    - Data lost on restart
    - Not shared between processes
    
    Use case:
    - Unit tests (fake gateway)
    - Local development without a database
    """
    
    def __init__(self):
        self._rows: List[HitRow] = []
        self._lock = threading.Lock()
    
    def initialize(self) -> None:
        pass
    
    def insert_hit(self, hit: HitCreate) -> int:
        with self._lock:
            row = HitRow(id=len(self._rows) + 1, **hit.model_dump())
            self._rows.append(row)
            return row.id
    
    def _snapshot(self) -> List[HitRow]:
        with self._lock:
            return list(self._rows)
    
    def fetch_hits(
        self,
        limit: int,
        offset: int,
        ip_filter: Optional[str] = None,
        host_filter: Optional[str] = None,
    ) -> HitPage:
        rows = self._snapshot()
        if ip_filter:
            needle = ip_filter.lower()
            rows = [r for r in rows if needle in r.ip.lower()]
        if host_filter:
            rows = [r for r in rows if r.host == host_filter]
        rows.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return HitPage(hits=rows[offset:offset + limit], total_count=len(rows))
    
    def distinct_hosts(self) -> List[str]:
        return sorted({r.host for r in self._snapshot()})
    
    def count_hits(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        return sum(
            1 for r in self._snapshot()
            if (start is None or r.created_at >= start) and (end is None or r.created_at < end)
        )
    
    def count_distinct(self, column: str) -> int:
        if column not in DISTINCT_COLUMNS:
            raise ValueError(f"Cannot count distinct values of {column!r}")
        return len({getattr(r, column) for r in self._snapshot()})
    
    def ping(self) -> None:
        pass
    
    def server_version(self) -> str:
        return "in-memory"
