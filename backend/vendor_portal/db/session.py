"""Engine and session factory.

SQLite (development, tests) gets NullPool and cross-thread connections;
server databases get a small pre-pinged QueuePool.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from vendor_portal.core.config import settings

SERVER_POOL = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 30,
    "pool_recycle": 3600,
    "pool_pre_ping": True,
}


def make_engine(url: str, **overrides):
    """Engine for `url`; keyword overrides win (tests pass poolclass=StaticPool)."""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}, "poolclass": NullPool}
    else:
        options = dict(SERVER_POOL)
    options.update(overrides)
    return create_engine(url, **options)


engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
