"""
Database engine, session factory and request-scoped session dependency.
"""

import json

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from motour.core.config import settings


def _json_serializer(value) -> str:
    # Keep non-ASCII text readable so LIKE searches over JSON columns match it
    return json.dumps(value, ensure_ascii=False)


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live as long as their connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options
    return {"pool_pre_ping": True, "pool_recycle": 300}


engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    json_serializer=_json_serializer,
    **_engine_options(settings.database_url)
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db():
    """Yield a session for the duration of one request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
