"""
Shared FastAPI dependency helpers.

`get_db` hands each request its own SQLAlchemy session. `get_intake`
builds the registration service once per process from the settings:
the community -> store table and the notifier are constructed here and
injected, so tests can override this single dependency.
"""

from functools import lru_cache
from typing import Generator

from sqlalchemy.orm import Session

from sundayreg.config import get_settings
from sundayreg.db import SessionLocal
from sundayreg.services.intake import RegistrationIntake
from sundayreg.services.notifier import build_notifier
from sundayreg.services.store import build_router


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache(maxsize=1)
def get_intake() -> RegistrationIntake:
    settings = get_settings()
    return RegistrationIntake(
        router=build_router(settings, session_factory=SessionLocal),
        notifier=build_notifier(settings),
        settings=settings,
    )
