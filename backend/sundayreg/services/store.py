# sundayreg/services/store.py
"""
Registration stores and community routing.

A store is append-only: `append` a batch, `read_all` everything back,
and optionally `publish_dashboards` (the spreadsheet backend writes its
summary tabs there; SQL dashboards are computed on read instead).

Appends are serialised per store with a lock. The single-writer
assumption is explicit here rather than left to the hosting platform.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sundayreg.config import Settings
from sundayreg.exceptions import StoreError, UnknownCommunityError
from sundayreg.models.registration import Registration
from sundayreg.schemas.dashboard import DashboardSnapshot
from sundayreg.schemas.registration import RegistrationRecord

logger = logging.getLogger(__name__)


class RegistrationStore(Protocol):
    def append(self, records: Sequence[RegistrationRecord]) -> None: ...

    def read_all(self) -> List[RegistrationRecord]: ...

    def publish_dashboards(self, snapshot: DashboardSnapshot) -> None: ...


# ─────────────────────────────────────────────────────────────────────────────
# SQL
# ─────────────────────────────────────────────────────────────────────────────

class SqlRegistrationStore:
    """Rows for one community in the shared `registrations` table."""

    def __init__(self, session_factory: Callable[[], Session], community: str):
        self._session_factory = session_factory
        self.community = community
        self._lock = threading.Lock()

    def append(self, records: Sequence[RegistrationRecord]) -> None:
        if not records:
            return
        with self._lock:
            db = self._session_factory()
            try:
                db.add_all(
                    Registration(
                        timestamp=r.timestamp,
                        community=self.community,
                        first_name=r.first_name,
                        last_name=r.last_name,
                        email=r.email,
                        registrant_type=r.registrant_type,
                        session_label=r.session_label,
                        sunday_date=r.sunday_date,
                    )
                    for r in records
                )
                # whole batch in one transaction: nothing is half-written
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                raise StoreError(f"append to registrations failed: {type(e).__name__}: {e}") from e
            finally:
                db.close()

    def read_all(self) -> List[RegistrationRecord]:
        db = self._session_factory()
        try:
            rows = db.execute(
                select(Registration)
                .where(Registration.community == self.community)
                .order_by(Registration.timestamp.desc(), Registration.id.desc())
            ).scalars().all()
            return [RegistrationRecord.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreError(f"read registrations failed: {type(e).__name__}: {e}") from e
        finally:
            db.close()

    def publish_dashboards(self, snapshot: DashboardSnapshot) -> None:
        logger.debug(
            "sql store %s: dashboards computed on read (%s Sundays, %s registrations)",
            self.community,
            snapshot.sundays.sunday_count,
            snapshot.sundays.total,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Routing
# ─────────────────────────────────────────────────────────────────────────────

class StoreRouter:
    """Maps a community name to its store. Injected, never global."""

    def __init__(self, stores: Mapping[str, RegistrationStore], default: str):
        if default not in stores:
            raise ValueError(f"default community {default!r} has no store")
        self._stores: Dict[str, RegistrationStore] = dict(stores)
        self.default = default

    @property
    def communities(self) -> List[str]:
        return sorted(self._stores)

    def resolve_name(self, community: Optional[str]) -> str:
        name = (community or "").strip().lower() or self.default
        if name not in self._stores:
            raise UnknownCommunityError(community or "")
        return name

    def for_community(self, community: Optional[str]) -> Tuple[str, RegistrationStore]:
        name = self.resolve_name(community)
        return name, self._stores[name]


def build_router(
    settings: Settings,
    session_factory: Optional[Callable[[], Session]] = None,
    sheets_client=None,
) -> StoreRouter:
    """Construct one store per configured community for the chosen backend."""
    stores: Dict[str, RegistrationStore] = {}

    if settings.store_backend == "sheets":
        from sundayreg.services.sheets_store import SheetRegistrationStore, open_spreadsheet

        if sheets_client is None:
            from sundayreg.services.sheets_store import authorize

            sheets_client = authorize(settings.google_creds_json)
        for name, key in settings.communities.items():
            if not key:
                raise ValueError(f"community {name!r} has no spreadsheet key (COMMUNITIES={name}=<key>)")
            stores[name] = SheetRegistrationStore(
                open_spreadsheet(sheets_client, key), tz=settings.tz
            )
    else:
        if session_factory is None:
            from sundayreg.db import SessionLocal

            session_factory = SessionLocal
        for name in settings.communities:
            stores[name] = SqlRegistrationStore(session_factory, name)

    logger.info(
        "store router: backend=%s communities=%s default=%s",
        settings.store_backend,
        ",".join(sorted(stores)),
        settings.default_community,
    )
    return StoreRouter(stores, settings.default_community)
