"""Sheet layouts and record types for the row store.

Every sheet is a flat grid addressed by 1-based row index; the meaning of each
column is fixed by convention. This module is the only place that knows those
positions: callers work with the record types and never index rows directly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum
from typing import Any, Sequence


@dataclass(frozen=True, slots=True)
class SheetLayout:
    name: str
    header_rows: int
    width: int

    @property
    def first_data_row(self) -> int:
        """1-based sheet row of the first record."""
        return self.header_rows + 1


LOGIN_SHEET = SheetLayout(name="Login", header_rows=1, width=6)
MASTER_SHEET = SheetLayout(name="Master", header_rows=1, width=9)
DATA_SHEET = SheetLayout(name="Data", header_rows=1, width=10)
REQUEST_SHEET = SheetLayout(name="Request", header_rows=6, width=14)
# Tab name is spelled this way in the live spreadsheet.
RECEIVING_SHEET = SheetLayout(name="Reciving", header_rows=1, width=8)


class LoginColumn(IntEnum):
    FULL_NAME = 0
    USERNAME = 1
    PASSWORD = 2
    ROLE = 3
    PAGES = 4
    DELETED = 5


class MasterColumn(IntEnum):
    PERSON_NAME = 0
    MODE = 1
    GROUP_HEAD = 2
    VENDOR = 5
    REASON = 6
    DEPARTMENT = 8


class DataColumn(IntEnum):
    TIMESTAMP = 0
    PERSON_NAME = 1
    DATE = 2
    INCOMING = 3
    OUTGOING = 4
    MODE = 5
    GROUP_HEAD = 6
    REASON = 7
    ATTACHMENT = 8
    MONTH = 9


class RequestColumn(IntEnum):
    TIMESTAMP = 0
    REQUEST_NO = 1
    GROUP_HEAD = 2
    PAY_TO = 3
    AMOUNT = 4
    REMARKS = 5
    ATTACHMENT = 6
    NAME = 7
    DEPARTMENT = 8
    PLANNED = 9
    ACTUAL = 10
    DELAY = 11
    STATUS = 12
    APPROVAL_REMARKS = 13


class ReceivingColumn(IntEnum):
    TIMESTAMP = 0
    DATE = 1
    VENDOR = 2
    INVOICE_AMOUNT = 3
    INVOICE_NUMBER = 4
    MODE = 5
    REMARKS = 6
    IMAGE_LINK = 7


SOFT_DELETE_SENTINEL = "deleted"


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def cell(row: Sequence[Any], col: int) -> str:
    """Return the cell as text; missing or null cells are ''."""

    if col >= len(row):
        return ""
    value = row[col]
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


_FLOAT_PREFIX = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_amount(value: Any) -> float:
    """Parse like JavaScript `parseFloat`: leading number or 0."""

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    m = _FLOAT_PREFIX.match(str(value))
    if not m:
        return 0.0
    try:
        return float(m.group(1))
    except ValueError:
        return 0.0


_SHEET_DATE_LITERAL = re.compile(r"Date\((\d+),(\d+),(\d+)(?:,(\d+),(\d+),(\d+))?")
_DMY = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})(?:[ T,]+(\d{1,2}):(\d{2})(?::(\d{2}))?)?\s*$")


def parse_sheet_timestamp(value: Any) -> datetime | None:
    """Parse the timestamp forms the spreadsheet hands back.

    Supported:
    - `Date(2025,9,19)` / `Date(2025,9,19,14,3,22)` literals (month is 0-based)
    - ISO dates and datetimes (`2025-10-19`, `2025-10-19 14:03:22`, `...T...Z`)
    - `dd/mm/yyyy` with an optional `HH:MM[:SS]` part (what the forms write)
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    s = str(value).strip()
    if not s:
        return None

    m = _SHEET_DATE_LITERAL.search(s)
    if m:
        parts = [int(p) if p is not None else 0 for p in m.groups()]
        y, mon, d, hh, mm, ss = parts
        try:
            return datetime(y, mon + 1, d, hh, mm, ss)
        except ValueError:
            return None

    m = _DMY.match(s)
    if m:
        d, mon, y = int(m.group(1)), int(m.group(2)), int(m.group(3))
        hh = int(m.group(4) or 0)
        mm = int(m.group(5) or 0)
        ss = int(m.group(6) or 0)
        try:
            return datetime(y, mon, d, hh, mm, ss)
        except ValueError:
            return None

    iso = s[:-1] + "+00:00" if s.endswith("Z") else s
    try:
        parsed = datetime.fromisoformat(iso)
    except ValueError:
        return None
    return parsed.replace(tzinfo=None)


def parse_sheet_date(value: Any) -> date | None:
    ts = parse_sheet_timestamp(value)
    return ts.date() if ts else None


def format_day_month_year(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def format_month_label(d: date) -> str:
    """`October 2026` style label used for monthly grouping."""
    return d.strftime("%B %Y")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LoginRecord:
    row_index: int
    full_name: str
    username: str
    password: str
    role: str
    pages: str
    deleted: bool

    @classmethod
    def from_row(cls, row: Sequence[Any], *, row_index: int) -> "LoginRecord":
        return cls(
            row_index=row_index,
            full_name=cell(row, LoginColumn.FULL_NAME).strip(),
            username=cell(row, LoginColumn.USERNAME).strip(),
            password=cell(row, LoginColumn.PASSWORD).strip(),
            role=cell(row, LoginColumn.ROLE),
            pages=cell(row, LoginColumn.PAGES),
            deleted=bool(cell(row, LoginColumn.DELETED).strip()),
        )


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    timestamp: str
    person_name: str
    date: date
    incoming: float
    outgoing: float
    mode: str
    group_head: str
    reason: str
    attachment: str = ""
    month_label: str = ""
    row_index: int | None = None

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()

    @classmethod
    def from_row(cls, row: Sequence[Any], *, row_index: int) -> "TransactionRecord | None":
        parsed = parse_sheet_date(row[DataColumn.DATE] if len(row) > DataColumn.DATE else None)
        if parsed is None:
            return None
        return cls(
            timestamp=cell(row, DataColumn.TIMESTAMP),
            person_name=cell(row, DataColumn.PERSON_NAME),
            date=parsed,
            incoming=parse_amount(row[DataColumn.INCOMING] if len(row) > DataColumn.INCOMING else None),
            outgoing=parse_amount(row[DataColumn.OUTGOING] if len(row) > DataColumn.OUTGOING else None),
            mode=cell(row, DataColumn.MODE),
            group_head=cell(row, DataColumn.GROUP_HEAD),
            reason=cell(row, DataColumn.REASON),
            attachment=cell(row, DataColumn.ATTACHMENT),
            month_label=cell(row, DataColumn.MONTH),
            row_index=row_index,
        )

    def to_row(self) -> list[Any]:
        return [
            self.timestamp,
            self.person_name,
            format_day_month_year(self.date),
            self.incoming,
            self.outgoing,
            self.mode,
            self.group_head,
            self.reason,
            self.attachment,
            self.month_label,
        ]


@dataclass(frozen=True, slots=True)
class RequestRecord:
    row_index: int
    timestamp: str
    request_no: str
    group_head: str
    pay_to: str
    amount: float
    remarks: str
    attachment: str
    name: str
    department: str
    planned: str = ""
    actual: str = ""
    delay: str = ""
    status: str = ""
    approval_remarks: str = ""

    @property
    def is_pending(self) -> bool:
        return bool(self.planned) and not self.actual

    @property
    def is_history(self) -> bool:
        return bool(self.planned) and bool(self.actual)

    @classmethod
    def from_row(cls, row: Sequence[Any], *, row_index: int) -> "RequestRecord":
        return cls(
            row_index=row_index,
            timestamp=cell(row, RequestColumn.TIMESTAMP),
            request_no=cell(row, RequestColumn.REQUEST_NO),
            group_head=cell(row, RequestColumn.GROUP_HEAD),
            pay_to=cell(row, RequestColumn.PAY_TO),
            amount=parse_amount(row[RequestColumn.AMOUNT] if len(row) > RequestColumn.AMOUNT else None),
            remarks=cell(row, RequestColumn.REMARKS),
            attachment=cell(row, RequestColumn.ATTACHMENT),
            name=cell(row, RequestColumn.NAME),
            department=cell(row, RequestColumn.DEPARTMENT),
            planned=cell(row, RequestColumn.PLANNED),
            actual=cell(row, RequestColumn.ACTUAL),
            delay=cell(row, RequestColumn.DELAY),
            status=cell(row, RequestColumn.STATUS),
            approval_remarks=cell(row, RequestColumn.APPROVAL_REMARKS),
        )

    def to_row(self) -> list[Any]:
        return [
            self.timestamp,
            self.request_no,
            self.group_head,
            self.pay_to,
            self.amount,
            self.remarks,
            self.attachment,
            self.name,
            self.department,
            self.planned,
            self.actual,
            self.delay,
            self.status,
            self.approval_remarks,
        ]


@dataclass(frozen=True, slots=True)
class ReceivingRecord:
    timestamp: str
    date: str
    vendor: str
    invoice_amount: float
    invoice_number: str
    mode: str
    remarks: str
    image_link: str = ""
    row_index: int | None = None

    @classmethod
    def from_row(cls, row: Sequence[Any], *, row_index: int) -> "ReceivingRecord":
        return cls(
            timestamp=cell(row, ReceivingColumn.TIMESTAMP),
            date=cell(row, ReceivingColumn.DATE),
            vendor=cell(row, ReceivingColumn.VENDOR),
            invoice_amount=parse_amount(
                row[ReceivingColumn.INVOICE_AMOUNT] if len(row) > ReceivingColumn.INVOICE_AMOUNT else None
            ),
            invoice_number=cell(row, ReceivingColumn.INVOICE_NUMBER),
            mode=cell(row, ReceivingColumn.MODE),
            remarks=cell(row, ReceivingColumn.REMARKS),
            image_link=cell(row, ReceivingColumn.IMAGE_LINK),
            row_index=row_index,
        )

    def to_row(self) -> list[Any]:
        return [
            self.timestamp,
            self.date,
            self.vendor,
            self.invoice_amount,
            self.invoice_number,
            self.mode,
            self.remarks,
            self.image_link,
        ]


def _data_rows(rows: list[list[Any]], layout: SheetLayout) -> list[tuple[int, list[Any]]]:
    return [
        (layout.first_data_row + i, r)
        for i, r in enumerate(rows[layout.header_rows:])
    ]


def parse_login_rows(rows: list[list[Any]]) -> list[LoginRecord]:
    """Login records with a username; deleted rows are kept (callers decide)."""

    out = [LoginRecord.from_row(r, row_index=i) for i, r in _data_rows(rows, LOGIN_SHEET)]
    return [u for u in out if u.username]


def parse_transaction_rows(rows: list[list[Any]]) -> list[TransactionRecord]:
    """Transactions with a parseable date; other rows are discarded."""

    out: list[TransactionRecord] = []
    for i, r in _data_rows(rows, DATA_SHEET):
        t = TransactionRecord.from_row(r, row_index=i)
        if t is not None:
            out.append(t)
    return out


def parse_request_rows(rows: list[list[Any]]) -> list[RequestRecord]:
    out = [RequestRecord.from_row(r, row_index=i) for i, r in _data_rows(rows, REQUEST_SHEET)]
    return [r for r in out if r.request_no]


def parse_receiving_rows(rows: list[list[Any]]) -> list[ReceivingRecord]:
    out = [ReceivingRecord.from_row(r, row_index=i) for i, r in _data_rows(rows, RECEIVING_SHEET)]
    return [r for r in out if r.timestamp]


def blank_row(layout: SheetLayout) -> list[str]:
    """A row of no-op sentinels for partial `update` calls."""
    return [""] * layout.width
