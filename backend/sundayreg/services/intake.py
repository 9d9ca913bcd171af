# sundayreg/services/intake.py
"""
Registration intake: one form submission start to finish.

    1) resolve the community to its store       (unknown -> UnknownCommunityError)
    2) append one record per registrant          (failure -> StoreError, aborts)
    3) recompute + publish the dashboards        (failure -> logged, submission still succeeds)
    4) one confirmation email per unique address (failures counted, never fatal)

Each step returns a small result value; `submit` combines them into the
SubmissionResult handed back to the form.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

from sundayreg.config import Settings
from sundayreg.exceptions import AggregationError, NotificationError, StoreError, ValidationError
from sundayreg.schemas.dashboard import DashboardSnapshot
from sundayreg.schemas.registration import (
    RegistrantIn,
    RegistrationRecord,
    SubmissionIn,
    SubmissionResult,
    SundayTarget,
)
from sundayreg.services import aggregates
from sundayreg.services.notifier import Notifier
from sundayreg.services.store import RegistrationStore, StoreRouter
from sundayreg.services.sunday import resolve, sunday_label

logger = logging.getLogger(__name__)


# ---------- step results ----------

@dataclass(frozen=True)
class AppendResult:
    community: str
    count: int


@dataclass(frozen=True)
class AggregateResult:
    ok: bool
    snapshot: Optional[DashboardSnapshot] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class NotifyResult:
    sent: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


# ---------- service ----------

class RegistrationIntake:
    def __init__(
        self,
        router: StoreRouter,
        notifier: Notifier,
        settings: Settings,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.router = router
        self.notifier = notifier
        self.settings = settings
        self._clock = clock or (lambda: datetime.now(settings.tz))

    def now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=self.settings.tz)
        return now.astimezone(self.settings.tz)

    def sunday_target(self, now: Optional[datetime] = None) -> SundayTarget:
        return resolve(now or self.now(), self.settings.tz, self.settings.cutoff_hour)

    # ---- read side ----

    def records(self, community: Optional[str] = None) -> List[RegistrationRecord]:
        _, store = self.router.for_community(community)
        return store.read_all()

    def dashboards(self, community: Optional[str] = None, now: Optional[datetime] = None) -> DashboardSnapshot:
        name, store = self.router.for_community(community)
        return aggregates.build_dashboards(store.read_all(), now or self.now(), self.settings.tz, name)

    def refresh_dashboards(self, community: Optional[str] = None, now: Optional[datetime] = None) -> AggregateResult:
        """Recompute all three views and publish them. Never raises."""
        try:
            name, store = self.router.for_community(community)
            snapshot = aggregates.build_dashboards(
                store.read_all(), now or self.now(), self.settings.tz, name
            )
            store.publish_dashboards(snapshot)
            return AggregateResult(ok=True, snapshot=snapshot)
        except Exception as e:
            err = AggregationError(f"dashboard refresh failed: {type(e).__name__}: {e}")
            logger.exception("%s", err)
            return AggregateResult(ok=False, error=str(err))

    # ---- write side ----

    def _build_records(
        self,
        form: SubmissionIn,
        community: str,
        timestamp: datetime,
        sunday: date,
    ) -> List[RegistrationRecord]:
        session = form.session_info or self.settings.default_session_label
        return [
            RegistrationRecord(
                timestamp=timestamp,
                community=community,
                first_name=r.first_name,
                last_name=r.last_name,
                email=str(r.email),
                registrant_type=r.registrant_type,
                session_label=session,
                sunday_date=sunday,
            )
            for r in form.registrants
        ]

    def _append(self, store: RegistrationStore, community: str, records: Sequence[RegistrationRecord]) -> AppendResult:
        try:
            store.append(records)
        except StoreError as e:
            if e.appended:
                logger.warning(
                    "partial batch in %s: %s of %s rows written before failure",
                    community, e.appended, len(records),
                )
            raise
        except Exception as e:
            raise StoreError(f"append failed: {type(e).__name__}: {e}") from e
        return AppendResult(community=community, count=len(records))

    def _notify(
        self,
        registrants: Sequence[RegistrantIn],
        label: str,
        community: str,
        session: str,
    ) -> NotifyResult:
        sent: List[str] = []
        failed: List[str] = []
        for address, group in aggregates.group_by_email(registrants).items():
            try:
                ok = self.notifier.notify(address, group, label, community, session)
                if not ok:
                    raise NotificationError(address)
            except Exception as e:
                logger.warning("confirmation email not sent: %s", e)
                failed.append(address)
            else:
                sent.append(address)
        return NotifyResult(sent=sent, failed=failed)

    def submit(self, form: SubmissionIn, now: Optional[datetime] = None) -> SubmissionResult:
        community, store = self.router.for_community(form.community)
        if not form.registrants:
            raise ValidationError("At least one registrant is required")

        # one timestamp for the whole batch
        timestamp = now or self.now()
        sunday = form.sunday_date or self.sunday_target(timestamp).date
        if sunday.weekday() != 6:
            raise ValidationError(f"{sunday.isoformat()} is not a Sunday")
        label = sunday_label(sunday)
        session = form.session_info or self.settings.default_session_label

        records = self._build_records(form, community, timestamp, sunday)
        appended = self._append(store, community, records)
        logger.info(
            "registered %s for %s in %s", appended.count, sunday.isoformat(), community
        )

        refreshed = self.refresh_dashboards(community, timestamp)

        notified = self._notify(form.registrants, label, community, session)

        return SubmissionResult(
            success=True,
            message=f"Registered {appended.count} for {label}",
            count=appended.count,
            emails_sent=len(notified.sent),
            email_errors=len(notified.failed),
            failed_emails=notified.failed,
            sunday_date=sunday,
            sunday_label=label,
            dashboards_refreshed=refreshed.ok,
        )
