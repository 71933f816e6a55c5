"""
Database wiring (SQLAlchemy engine, sessions, schema bootstrap).
"""

from .connection import Base, build_engine, build_session_factory, init_database

__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "init_database",
]
