"""
SQLAlchemy engine, session factory and schema bootstrap.

The engine is built from ``settings.database_url`` once per process.
Schema creation runs once at startup and is idempotent, so several
processes may boot concurrently against the same database.
"""

import structlog
from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

log = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the SQLAlchemy engine.

    SQLite needs ``check_same_thread=False`` because FastAPI runs sync
    handlers in a threadpool; in-memory SQLite additionally needs a
    StaticPool so every session sees the same database.
    """
    kwargs = {"echo": echo, "pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_database(engine: Engine) -> None:
    """Create the hits table if missing, otherwise add any missing indexes."""
    # Import models to ensure they're registered with Base
    from hitlog_app.models import Hit

    inspector = inspect(engine)
    if not inspector.has_table(Hit.__tablename__):
        log.info("creating_hits_table")
        Base.metadata.create_all(bind=engine, checkfirst=True)
        log.info("hits_table_created")
        return

    existing = {ix["name"] for ix in inspector.get_indexes(Hit.__tablename__)}
    for index in Hit.__table__.indexes:
        if index.name in existing:
            continue
        try:
            index.create(bind=engine, checkfirst=True)
            log.info("index_added", index=index.name)
        except SQLAlchemyError as e:
            # Another instance may have created it in the meantime
            log.warning("index_add_failed", index=index.name, error=str(e))
