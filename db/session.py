from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import get_settings
from app.core.errors import ConfigurationError

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
)


@lru_cache
def get_engine() -> Engine:
    """
    Process-wide engine, created on first use and reused afterwards.

    pool_pre_ping replaces connections that died between requests, so a
    dropped store connection reconnects on the next checkout.
    """
    settings = get_settings()
    url = settings.DATABASE_URL
    if not url:
        raise ConfigurationError("DATABASE_URL is not configured")

    if url.startswith("sqlite"):
        return create_engine(
            url,
            pool_pre_ping=True,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout_s,
        pool_recycle=settings.db_pool_recycle_s,
    )


def get_session() -> Session:
    return SessionLocal(bind=get_engine())


def init_db() -> None:
    from db.models import ChatTurn  # noqa: F401
    from db.base import Base

    Base.metadata.create_all(bind=get_engine())
