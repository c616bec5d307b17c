"""
Database connection and session management.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
import os
from typing import Generator

from ..config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite connections are shared across FastAPI's threads."""
    kwargs = {
        "echo": os.getenv("SQL_ECHO", "false").lower() == "true"
    }
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
        kwargs["pool_recycle"] = 300

    return create_engine(database_url, **kwargs)


# Create engine
engine = build_engine(settings.database_url)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db() -> Generator[Session, None, None]:
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def create_tables(bind: Engine = None):
    """Create all database tables."""
    from ..models.database_models import Base
    Base.metadata.create_all(bind=bind or engine)

def drop_tables(bind: Engine = None):
    """Drop all database tables."""
    from ..models.database_models import Base
    Base.metadata.drop_all(bind=bind or engine)
