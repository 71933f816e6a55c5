"""
Hit storage module (the storage gateway).

This module implements the Strategy Pattern for pluggable hit storage.
"""

from .strategies import HitStorageStrategy, SQLHitStorage, InMemoryHitStorage
from .factory import HitStorageFactory, HitStorageBackend

__all__ = [
    "HitStorageStrategy",
    "SQLHitStorage",
    "InMemoryHitStorage",
    "HitStorageFactory",
    "HitStorageBackend",
]
