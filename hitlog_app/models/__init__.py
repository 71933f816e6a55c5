"""
Database models for the hit logger.

Only one table is persisted: ``hits``. Hosts are derived from it.
"""

from .hit import Hit

__all__ = ["Hit"]
