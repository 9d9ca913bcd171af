import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from sundayreg.config import get_settings

logger = logging.getLogger(__name__)

DATABASE_URL = get_settings().database_url
logger.debug("DATABASE_URL = %s", DATABASE_URL)


def make_engine(url: str, **kwargs):
    """SQLite needs the same-thread check off for FastAPI's threadpool."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


engine = make_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
