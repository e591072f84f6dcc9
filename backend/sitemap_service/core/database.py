"""
Database configuration and session management
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from sitemap_service.core.config import settings, DATABASE_URL
from sitemap_service.models.base import Base

logger = logging.getLogger(__name__)


def make_engine(url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine with settings suited to the backend

    In-memory SQLite shares one connection so every session sees the
    same database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=10,
        max_overflow=20,
        echo=echo,
    )


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=bind,
        expire_on_commit=False  # Keep objects accessible after commit
    )


# Create SQLAlchemy engine and SessionLocal class
engine = make_engine(DATABASE_URL, echo=settings.DEBUG and settings.LOG_LEVEL == "DEBUG")
SessionLocal = make_session_factory(engine)


@contextmanager
def session_scope(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    """
    Session from the given factory, SessionLocal by default

    Rolled back on error and always closed.
    """
    db = (factory or SessionLocal)()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def create_tables(bind: Engine = None) -> None:
    """
    Create all database tables
    Note: In production, use migrations instead
    """
    try:
        Base.metadata.create_all(bind=bind or engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {e}")
        raise
