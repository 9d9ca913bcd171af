# tests/conftest.py
import os

# Point the app at a throwaway DB before anything imports sundayreg.db
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("TIMEZONE", "America/New_York")

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import sundayreg.models  # noqa: F401
from sundayreg.config import Settings
from sundayreg.db import Base
from sundayreg.dependencies import get_db, get_intake
from sundayreg.main import app
from sundayreg.services.intake import RegistrationIntake
from sundayreg.services.store import SqlRegistrationStore, StoreRouter

NY = ZoneInfo("America/New_York")
# Wednesday before Sunday 2024-03-03
WEDNESDAY = datetime(2024, 2, 28, 10, 0, tzinfo=NY)


class RecordingNotifier:
    """Remembers every notify() call; addresses in `fail_for` report failure."""

    def __init__(self, fail_for=(), raise_for=()):
        self.calls = []
        self.fail_for = set(fail_for)
        self.raise_for = set(raise_for)

    def notify(self, address, registrants, sunday_label, community, session_label=None):
        self.calls.append(
            {
                "address": address,
                "names": [f"{r.first_name} {r.last_name}" for r in registrants],
                "sunday_label": sunday_label,
                "community": community,
                "session_label": session_label,
            }
        )
        if address in self.raise_for:
            raise RuntimeError("smtp exploded")
        return address not in self.fail_for


@pytest.fixture
def settings():
    return Settings(
        timezone="America/New_York",
        cutoff_hour=14,
        default_community="main",
        communities={"main": None, "north": None},
    )


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    """Mutable clock: tests can set clock.now to move time."""

    class _Clock:
        now = WEDNESDAY

        def __call__(self):
            return self.now

    return _Clock()


@pytest.fixture
def router(session_factory, settings):
    return StoreRouter(
        {name: SqlRegistrationStore(session_factory, name) for name in settings.communities},
        settings.default_community,
    )


@pytest.fixture
def intake(router, notifier, settings, clock):
    return RegistrationIntake(router=router, notifier=notifier, settings=settings, clock=clock)


@pytest.fixture
def client(intake, session_factory):
    def _db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_intake] = lambda: intake
    app.dependency_overrides[get_db] = _db
    yield TestClient(app)
    app.dependency_overrides.clear()
