# identity_service/db/session.py
"""
Engine and session factory built from DATABASE_URL.

Pool settings only apply to server databases; SQLite URLs get a
thread-shareable connection instead.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from identity_service.core.config import settings


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
