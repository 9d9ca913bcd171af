# sundayreg/services/sheets_store.py
"""
Google Sheets backend.

One spreadsheet per community:
    • "Registrations"   – the append-only rows (header on row 1)
    • "Monthly Summary" – rewritten on every publish
    • "Yearly Summary"  – rewritten on every publish
    • "Sunday Summary"  – rewritten on every publish

Columns are looked up by header name, not position, so an operator can
reorder them in the sheet without breaking reads.
"""
from __future__ import annotations

import json
import logging
import threading
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

import gspread
from google.oauth2.service_account import Credentials
from gspread.exceptions import GSpreadException, WorksheetNotFound
from pydantic import ValidationError as PydanticValidationError

from sundayreg.exceptions import StoreError
from sundayreg.schemas.dashboard import AggregateRow, DashboardSnapshot
from sundayreg.schemas.registration import RegistrationRecord

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

REGISTRATIONS_WS = "Registrations"
MONTHLY_WS = "Monthly Summary"
YEARLY_WS = "Yearly Summary"
SUNDAY_WS = "Sunday Summary"

# header -> RegistrationRecord field
COLUMNS = {
    "Timestamp": "timestamp",
    "Community": "community",
    "First Name": "first_name",
    "Last Name": "last_name",
    "Email": "email",
    "Type": "registrant_type",
    "Session": "session_label",
    "Sunday Date": "sunday_date",
}
HEADER = list(COLUMNS)
TS_FORMAT = "%Y-%m-%d %H:%M:%S"

ROW_HEADER = ["Period", "Total", "Members", "Guests", "Unique Emails"]


# ---------- client helpers ----------

def authorize(creds_json: Optional[str]) -> gspread.Client:
    if not creds_json:
        raise ValueError("GOOGLE_CREDS_JSON is required for the sheets backend")
    info = json.loads(creds_json)
    # private keys pasted into env vars often carry literal "\n"
    pk = info.get("private_key", "")
    if "\\n" in pk:
        info["private_key"] = pk.replace("\\n", "\n")
    creds = Credentials.from_service_account_info(info, scopes=SCOPES)
    return gspread.authorize(creds)


def open_spreadsheet(client: gspread.Client, key: str):
    return client.open_by_key(key)


def open_or_create_ws(spreadsheet, title: str, header: List[str]):
    try:
        return spreadsheet.worksheet(title)
    except WorksheetNotFound:
        ws = spreadsheet.add_worksheet(title=title, rows=1000, cols=max(8, len(header)))
        ws.update([header])
        return ws


# ---------- row codecs ----------

def record_to_row(r: RegistrationRecord) -> List[str]:
    return [
        r.timestamp.strftime(TS_FORMAT),
        r.community,
        r.first_name,
        r.last_name,
        r.email,
        r.registrant_type.value,
        r.session_label,
        r.sunday_date.isoformat() if r.sunday_date else "",
    ]


def _parse_date(raw: str) -> Optional[date]:
    raw = (raw or "").strip()
    if not raw:
        return None
    for fmt in ("%Y-%m-%d", "%m/%d/%Y"):
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


# Sheets hands back display values; a date-typed cell reads as m/d/Y.
TS_READ_FORMATS = (TS_FORMAT, "%m/%d/%Y %H:%M:%S", "%m/%d/%Y %H:%M")


def _parse_timestamp(raw: str) -> datetime:
    for fmt in TS_READ_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    raise ValueError(f"unrecognised timestamp {raw!r}")


def row_to_record(row: Dict[str, str], tz: Optional[ZoneInfo] = None) -> RegistrationRecord:
    data: Dict[str, Any] = {field: (row.get(col) or "").strip() for col, field in COLUMNS.items()}
    ts = _parse_timestamp(data["timestamp"])
    data["timestamp"] = ts.replace(tzinfo=tz) if tz else ts
    data["sunday_date"] = _parse_date(data["sunday_date"])
    return RegistrationRecord.model_validate(data)


def render_rows(rows: Sequence[AggregateRow]) -> List[List[Any]]:
    return [[r.label, r.total, r.members, r.guests, r.unique_emails] for r in rows]


# ---------- store ----------

class SheetRegistrationStore:
    def __init__(self, spreadsheet, tz: Optional[ZoneInfo] = None):
        self._spreadsheet = spreadsheet
        self._tz = tz
        self._lock = threading.Lock()

    def _registrations(self):
        return open_or_create_ws(self._spreadsheet, REGISTRATIONS_WS, HEADER)

    def append(self, records: Sequence[RegistrationRecord]) -> None:
        if not records:
            return
        with self._lock:
            try:
                # one API call for the whole batch
                self._registrations().append_rows(
                    [record_to_row(r) for r in records],
                    value_input_option="RAW",
                )
            except GSpreadException as e:
                raise StoreError(f"append to sheet failed: {e}") from e

    def read_all(self) -> List[RegistrationRecord]:
        try:
            values = self._registrations().get_all_values()
        except GSpreadException as e:
            raise StoreError(f"read sheet failed: {e}") from e
        if not values:
            return []

        header = [h.strip() for h in values[0]]
        out: List[RegistrationRecord] = []
        for n, raw in enumerate(values[1:], start=2):
            row = dict(zip(header, raw))
            if not any(v.strip() for v in raw):
                continue
            try:
                out.append(row_to_record(row, self._tz))
            except (ValueError, PydanticValidationError):
                logger.warning("skipping unreadable row %s in %s", n, REGISTRATIONS_WS)
        out.sort(key=lambda r: r.timestamp, reverse=True)
        return out

    def publish_dashboards(self, snapshot: DashboardSnapshot) -> None:
        generated = snapshot.generated_at.strftime(TS_FORMAT)

        monthly = [ROW_HEADER] + render_rows([snapshot.monthly.row]) + [[], ["Updated", generated]]

        yearly = (
            [ROW_HEADER]
            + render_rows(snapshot.yearly.months)
            + render_rows([snapshot.yearly.total])
            + [[], ["Updated", generated]]
        )

        s = snapshot.sundays
        sundays = (
            [["Sunday Date", "Total", "Members", "Guests", "Unique Emails"]]
            + render_rows(s.rows)
            + [
                [],
                ["Sundays", s.sunday_count],
                ["Total Registrations", s.total],
                ["Members", s.members],
                ["Guests", s.guests],
                ["Average per Sunday", s.average_per_sunday],
                ["Updated", generated],
            ]
        )

        for title, values in ((MONTHLY_WS, monthly), (YEARLY_WS, yearly), (SUNDAY_WS, sundays)):
            ws = open_or_create_ws(self._spreadsheet, title, values[0])
            ws.clear()
            ws.update(values)
