from sqlalchemy import Column, Integer, String, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import INET
from hitlog_app.database.connection import Base


class Hit(Base):
    """
    One recorded visit.
    
    Rows are append-only: created once by the hit recorder, never updated
    or deleted by this service.
    
    ``ip`` is a native INET column on PostgreSQL and plain text elsewhere
    (SQLite in development and tests).
    """
    __tablename__ = "hits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ip = Column(String(45).with_variant(INET(), "postgresql"), nullable=False)
    user_agent = Column(Text, nullable=False)
    referer = Column(Text, nullable=False)
    host = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("hits_ip_index", "ip"),
        Index("hits_created_at_index", "created_at"),
        Index("hits_host_index", "host"),
        Index("hits_ip_created_at_index", "ip", "created_at"),
    )
