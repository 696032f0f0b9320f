"""
Database engine construction for the Credential Service
"""
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base
import logging

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Build the pooled async engine the credential store runs on.

    The pool is bounded by DB_POOL_SIZE + DB_MAX_OVERFLOW connections and a
    checkout waits at most DB_POOL_TIMEOUT_SECONDS.

    Args:
        settings: Service settings

    Returns:
        AsyncEngine: SQLAlchemy async engine
    """
    url = settings.DATABASE_URL
    # Bound parameters carry password hashes; keep them out of error text and echo logs
    engine_kwargs = {"echo": settings.DB_ECHO, "pool_pre_ping": True, "hide_parameters": True}

    # In-memory SQLite runs on a single static connection and takes no pool sizing
    if ":memory:" not in url:
        engine_kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        )

    engine = create_async_engine(url, **engine_kwargs)
    logger.info(
        "Created database engine with pool_size=%s, max_overflow=%s",
        settings.DB_POOL_SIZE, settings.DB_MAX_OVERFLOW
    )
    return engine
