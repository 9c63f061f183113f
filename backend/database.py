# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
SQLAlchemy engine, session factory, declarative base, and the FastAPI
dependency that provides a DB session per request.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import settings


def _engine_options(url: str) -> dict:
    """
    DB_MAX_CONNECTIONS is a hard cap on the pool: requests beyond it wait
    for a free connection instead of opening overflow connections.
    SQLite (local development, tests) is not pooled this way.
    """
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        # drops connections the server closed while idle
        "pool_pre_ping": True,
        "pool_size": settings.db_max_connections,
        "max_overflow": 0,
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    FastAPI dependency.  Yields a session for the duration of the request,
    then closes it.  Anything not committed by the handler is rolled back.
    Use with Depends(get_db).
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
