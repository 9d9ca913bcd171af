from datetime import date, datetime

import pytest
from gspread.exceptions import GSpreadException, WorksheetNotFound

from conftest import NY
from sundayreg.exceptions import StoreError
from sundayreg.schemas.registration import RegistrationRecord
from sundayreg.services import aggregates
from sundayreg.services.sheets_store import (
    HEADER,
    MONTHLY_WS,
    REGISTRATIONS_WS,
    SUNDAY_WS,
    YEARLY_WS,
    SheetRegistrationStore,
)


class FakeWorksheet:
    def __init__(self, title):
        self.title = title
        self.values = []
        self.fail = False

    def update(self, values):
        self.values = [list(map(str, row)) for row in values]

    def append_rows(self, rows, value_input_option=None):
        if self.fail:
            raise GSpreadException("quota")
        self.values.extend([list(map(str, r)) for r in rows])

    def get_all_values(self):
        return [list(r) for r in self.values]

    def clear(self):
        self.values = []


class FakeSpreadsheet:
    def __init__(self):
        self.sheets = {}

    def worksheet(self, title):
        if title not in self.sheets:
            raise WorksheetNotFound(title)
        return self.sheets[title]

    def add_worksheet(self, title, rows, cols):
        ws = FakeWorksheet(title)
        self.sheets[title] = ws
        return ws


def rec(first, email, kind, sunday, ts=datetime(2024, 2, 28, 10, 0, tzinfo=NY)):
    return RegistrationRecord(
        timestamp=ts,
        community="main",
        first_name=first,
        last_name="Doe",
        email=email,
        registrant_type=kind,
        session_label="Sunday Service",
        sunday_date=sunday,
    )


@pytest.fixture
def sheet():
    return FakeSpreadsheet()


@pytest.fixture
def store(sheet):
    return SheetRegistrationStore(sheet, tz=NY)


def test_append_creates_tab_with_header(store, sheet):
    store.append([rec("Alice", "a@x.com", "Member", date(2024, 3, 3))])
    values = sheet.sheets[REGISTRATIONS_WS].values
    assert values[0] == HEADER
    assert values[1] == [
        "2024-02-28 10:00:00", "main", "Alice", "Doe", "a@x.com", "Member", "Sunday Service", "2024-03-03",
    ]


def test_read_all_round_trips_newest_first(store):
    store.append([rec("Old", "o@x.com", "Guest", date(2024, 3, 3), ts=datetime(2024, 2, 26, 8, 0, tzinfo=NY))])
    store.append([rec("New", "n@x.com", "Member", date(2024, 3, 3))])
    records = store.read_all()
    assert [r.first_name for r in records] == ["New", "Old"]
    assert records[0].timestamp == datetime(2024, 2, 28, 10, 0, tzinfo=NY)
    assert records[1].registrant_type.value == "Guest"


def test_columns_are_found_by_header_name(store, sheet):
    ws = FakeWorksheet(REGISTRATIONS_WS)
    header = list(reversed(HEADER))
    row = ["2024-03-03", "Sunday Service", "guest", "p@x.com", "Poe", "Pat", "main", "2024-02-28 10:00:00"]
    ws.values = [header, row]
    sheet.sheets[REGISTRATIONS_WS] = ws

    (r,) = store.read_all()
    assert (r.first_name, r.last_name, r.email) == ("Pat", "Poe", "p@x.com")
    assert r.sunday_date == date(2024, 3, 3)
    assert r.registrant_type.value == "Guest"


def test_formatted_timestamp_cells_are_read(store, sheet):
    ws = FakeWorksheet(REGISTRATIONS_WS)
    ws.values = [
        HEADER,
        ["3/1/2024 10:15:00", "main", "Ann", "Lee", "ann@x.com", "Member", "S", "3/3/2024"],
        ["2/25/2024 9:05", "main", "Ben", "Lee", "ben@x.com", "Guest", "S", "2024-02-25"],
    ]
    sheet.sheets[REGISTRATIONS_WS] = ws

    newest, older = store.read_all()
    assert newest.timestamp == datetime(2024, 3, 1, 10, 15, tzinfo=NY)
    assert newest.sunday_date == date(2024, 3, 3)
    assert older.timestamp == datetime(2024, 2, 25, 9, 5, tzinfo=NY)
    assert aggregates.by_month([newest, older], 2024, 3, NY).total == 1


def test_blank_sunday_and_bad_rows(store, sheet):
    ws = FakeWorksheet(REGISTRATIONS_WS)
    ws.values = [
        HEADER,
        ["2024-02-28 10:00:00", "main", "A", "B", "a@x.com", "Member", "S", ""],
        ["not a date", "main", "C", "D", "c@x.com", "Member", "S", "2024-03-03"],
        ["2024-02-28 10:00:00", "main", "E", "F", "e@x.com", "Visitor", "S", "2024-03-03"],
        ["", "", "", "", "", "", "", ""],
    ]
    sheet.sheets[REGISTRATIONS_WS] = ws

    records = store.read_all()
    assert len(records) == 1
    assert records[0].sunday_date is None
    assert aggregates.by_sunday_date(records).sunday_count == 0


def test_append_failure_is_a_store_error(store, sheet):
    store.append([rec("Alice", "a@x.com", "Member", date(2024, 3, 3))])
    sheet.sheets[REGISTRATIONS_WS].fail = True
    with pytest.raises(StoreError):
        store.append([rec("Bob", "b@x.com", "Guest", date(2024, 3, 3))])


def test_publish_writes_three_summary_tabs(store, sheet):
    store.append([
        rec("Alice", "a@x.com", "Member", date(2024, 3, 3)),
        rec("Bob", "b@x.com", "Guest", date(2024, 3, 3)),
    ])
    snap = aggregates.build_dashboards(store.read_all(), datetime(2024, 2, 28, 12, tzinfo=NY), NY, "main")
    store.publish_dashboards(snap)

    assert {MONTHLY_WS, YEARLY_WS, SUNDAY_WS} <= set(sheet.sheets)
    sunday_tab = sheet.sheets[SUNDAY_WS].values
    assert sunday_tab[1] == ["2024-03-03", "2", "1", "1", "2"]
    assert ["Average per Sunday", "2"] in sunday_tab
    monthly_tab = sheet.sheets[MONTHLY_WS].values
    assert monthly_tab[1][0] == "February 2024"

    # republishing replaces, not appends
    store.publish_dashboards(snap)
    assert sheet.sheets[SUNDAY_WS].values == sunday_tab
