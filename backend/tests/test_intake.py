from datetime import date, datetime

import pytest

from conftest import NY, RecordingNotifier
from sundayreg.exceptions import StoreError, UnknownCommunityError
from sundayreg.schemas.registration import SubmissionIn
from sundayreg.services.intake import RegistrationIntake
from sundayreg.services.store import StoreRouter


def _form(registrants, **kw):
    return SubmissionIn.model_validate({"registrants": registrants, **kw})


ALICE = {"firstName": "Alice", "lastName": "Doe", "email": "a@x.com", "type": "Member"}
BOB = {"firstName": "Bob", "lastName": "Doe", "email": "b@x.com", "type": "Guest"}


def test_two_registrants_two_emails(intake, notifier):
    res = intake.submit(_form([ALICE, BOB], sundayDate="2024-03-03"))

    assert res.success and res.count == 2
    assert res.emails_sent == 2 and res.email_errors == 0
    assert res.dashboards_refreshed is True
    assert len(notifier.calls) == 2

    records = intake.records()
    assert len(records) == 2
    s = intake.dashboards().sundays
    assert len(s.rows) == 1
    row = s.rows[0]
    assert row.label == "2024-03-03"
    assert (row.total, row.members, row.guests, row.unique_emails) == (2, 1, 1, 2)


def test_shared_email_gets_one_notification(intake, notifier):
    bob_same = dict(BOB, email="A@x.com")
    res = intake.submit(_form([ALICE, bob_same], sundayDate="2024-03-03"))

    assert res.count == 2
    assert res.emails_sent == 1
    assert len(notifier.calls) == 1
    call = notifier.calls[0]
    assert call["names"] == ["Alice Doe", "Bob Doe"]
    assert call["sunday_label"] == "Sunday, March 3, 2024"
    assert call["community"] == "main"


def test_batch_shares_timestamp_session_and_sunday(intake):
    intake.submit(_form([ALICE, BOB], sessionInfo="Early Service"))
    records = intake.records()
    assert len({r.timestamp for r in records}) == 1
    assert {r.session_label for r in records} == {"Early Service"}
    # clock is Wednesday 2024-02-28 -> resolver picks 2024-03-03
    assert {r.sunday_date for r in records} == {date(2024, 3, 3)}


def test_default_session_label(intake, settings):
    intake.submit(_form([ALICE]))
    assert intake.records()[0].session_label == settings.default_session_label


def test_sunday_after_cutoff_registers_next_week(intake, clock):
    clock.now = datetime(2024, 3, 3, 15, 0, tzinfo=NY)
    res = intake.submit(_form([ALICE]))
    assert res.sunday_date == date(2024, 3, 10)


def test_unknown_community_rejected(intake):
    with pytest.raises(UnknownCommunityError):
        intake.submit(_form([ALICE], community="atlantis"))
    assert intake.records() == []


def test_communities_are_kept_apart(intake):
    intake.submit(_form([ALICE], community="north"))
    intake.submit(_form([BOB]))
    assert [r.first_name for r in intake.records("north")] == ["Alice"]
    assert [r.first_name for r in intake.records("main")] == ["Bob"]
    assert intake.records("NORTH")[0].community == "north"


def test_notification_failures_are_counted_not_fatal(router, settings, clock):
    notifier = RecordingNotifier(fail_for={"a@x.com"}, raise_for={"b@x.com"})
    intake = RegistrationIntake(router, notifier, settings, clock)
    carol = {"firstName": "Carol", "lastName": "Roe", "email": "c@x.com", "type": "Guest"}

    res = intake.submit(_form([ALICE, BOB, carol]))

    assert res.success
    assert res.count == 3
    assert res.emails_sent == 1
    assert res.email_errors == 2
    assert res.failed_emails == ["a@x.com", "b@x.com"]
    assert len(intake.records()) == 3


class _BrokenStore:
    def __init__(self, fail_append=False, fail_publish=False):
        self.fail_append = fail_append
        self.fail_publish = fail_publish
        self.rows = []

    def append(self, records):
        if self.fail_append:
            raise StoreError("disk full")
        self.rows.extend(records)

    def read_all(self):
        return list(self.rows)

    def publish_dashboards(self, snapshot):
        if self.fail_publish:
            raise RuntimeError("sheet quota exceeded")


def test_store_failure_aborts_without_emails(settings, clock):
    notifier = RecordingNotifier()
    intake = RegistrationIntake(
        StoreRouter({"main": _BrokenStore(fail_append=True)}, "main"), notifier, settings, clock
    )
    with pytest.raises(StoreError):
        intake.submit(_form([ALICE]))
    assert notifier.calls == []


class _PartialStore(_BrokenStore):
    def append(self, records):
        self.rows.extend(records[:1])
        raise StoreError("connection dropped", appended=1)


def test_partial_batch_is_logged_and_raised(settings, clock, caplog):
    notifier = RecordingNotifier()
    store = _PartialStore()
    intake = RegistrationIntake(StoreRouter({"main": store}, "main"), notifier, settings, clock)

    with caplog.at_level("WARNING", logger="sundayreg.services.intake"):
        with pytest.raises(StoreError) as exc:
            intake.submit(_form([ALICE, BOB]))

    assert exc.value.appended == 1
    assert "partial batch in main: 1 of 2 rows written" in caplog.text
    assert notifier.calls == []


def test_dashboard_failure_does_not_fail_submission(settings, clock):
    notifier = RecordingNotifier()
    store = _BrokenStore(fail_publish=True)
    intake = RegistrationIntake(StoreRouter({"main": store}, "main"), notifier, settings, clock)

    res = intake.submit(_form([ALICE]))

    assert res.success
    assert res.dashboards_refreshed is False
    assert len(store.rows) == 1
    assert len(notifier.calls) == 1


def test_refresh_dashboards_reports_failure(settings, clock):
    intake = RegistrationIntake(
        StoreRouter({"main": _BrokenStore(fail_publish=True)}, "main"), RecordingNotifier(), settings, clock
    )
    result = intake.refresh_dashboards()
    assert result.ok is False
    assert "sheet quota exceeded" in result.error
