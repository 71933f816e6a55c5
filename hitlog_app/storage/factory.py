"""
Factory for creating hit storage instances.
"""

from enum import Enum

import structlog

from .strategies import HitStorageStrategy, SQLHitStorage, InMemoryHitStorage
from hitlog_app.config import Settings
from hitlog_app.database.connection import build_engine

log = structlog.get_logger(__name__)


class HitStorageBackend(Enum):
    """Available hit storage backends"""
    SQL = "sql"
    MEMORY = "memory"


class HitStorageFactory:
    """
    Simple factory for creating hit storage instances.
    
    Configuration comes from the Settings passed in; the caller keeps the
    returned instance for the lifetime of the application.
    """
    
    @classmethod
    def create(cls, backend: HitStorageBackend, settings: Settings) -> HitStorageStrategy:
        """
        Create a hit storage instance.
        
        Args:
            backend: Type of storage backend (from enum)
            settings: Application settings
            
        Returns:
            Hit storage instance
        """
        if backend == HitStorageBackend.SQL:
            engine = build_engine(settings.database_url, echo=settings.debug)
            log.info("database_configured", url=settings.masked_database_url)
            return SQLHitStorage(engine)
        
        elif backend == HitStorageBackend.MEMORY:
            log.info("in_memory_storage_initialized")
            return InMemoryHitStorage()
        
        raise ValueError(f"Unknown storage backend: {backend}")
