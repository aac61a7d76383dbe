from __future__ import annotations

from datetime import date, datetime

from src.backend.ledger.integrations.sheet_schema import (
    REQUEST_SHEET,
    TransactionRecord,
    cell,
    parse_amount,
    parse_login_rows,
    parse_receiving_rows,
    parse_request_rows,
    parse_sheet_timestamp,
    parse_transaction_rows,
)
from src.backend.tests.fakes import DATA_HEADER, REQUEST_HEADER_ROWS, request_row


def test_parse_sheet_timestamp_forms() -> None:
    assert parse_sheet_timestamp("Date(2025,9,19)") == datetime(2025, 10, 19)
    assert parse_sheet_timestamp("Date(2025,0,5,14,3,22)") == datetime(2025, 1, 5, 14, 3, 22)
    assert parse_sheet_timestamp("19/10/2025 14:03:22") == datetime(2025, 10, 19, 14, 3, 22)
    assert parse_sheet_timestamp("05/01/2026") == datetime(2026, 1, 5)
    assert parse_sheet_timestamp("2026-10-19T08:30:00Z") == datetime(2026, 10, 19, 8, 30)
    assert parse_sheet_timestamp("2026-10-19 08:30:00") == datetime(2026, 10, 19, 8, 30)
    assert parse_sheet_timestamp("31/02/2026") is None
    assert parse_sheet_timestamp("soon") is None
    assert parse_sheet_timestamp("") is None


def test_parse_amount_follows_leading_number() -> None:
    assert parse_amount("12.5abc") == 12.5
    assert parse_amount(" -3") == -3.0
    assert parse_amount(40) == 40.0
    assert parse_amount("abc") == 0.0
    assert parse_amount(None) == 0.0
    assert parse_amount(True) == 0.0


def test_cell_normalises_missing_and_integral_values() -> None:
    assert cell(["a"], 3) == ""
    assert cell([None], 0) == ""
    assert cell([3.0], 0) == "3"
    assert cell([2.5], 0) == "2.5"


def test_parse_transaction_rows_skips_header_and_undated_rows() -> None:
    rows = [
        DATA_HEADER,
        ["19/10/2026 10:00:00", "alice", "18/10/2026", "100", "", "Cash", "Travel", "cab", "", "October 2026"],
        ["19/10/2026 10:05:00", "bob", "not a date", "5", "", "Cash", "", "", "", ""],
        ["19/10/2026 10:06:00", "bob", "Date(2026,9,1)", "", 20, "UPI", "Food", "lunch"],
    ]

    txns = parse_transaction_rows(rows)

    assert [t.row_index for t in txns] == [2, 4]
    assert txns[0].date == date(2026, 10, 18)
    assert txns[0].incoming == 100.0 and txns[0].outgoing == 0.0
    assert txns[1].iso_date == "2026-10-01"
    assert txns[1].attachment == ""


def test_transaction_to_row_writes_day_month_year() -> None:
    t = TransactionRecord(
        timestamp="ts", person_name="alice", date=date(2026, 3, 7),
        incoming=1.0, outgoing=0.0, mode="Cash", group_head="Travel", reason="cab",
    )
    assert t.to_row()[2] == "07/03/2026"
    assert len(t.to_row()) == 10


def test_parse_request_rows_starts_after_header_block() -> None:
    rows = list(REQUEST_HEADER_ROWS) + [request_row("REQ-001"), ["", ""], request_row("REQ-002")]

    reqs = parse_request_rows(rows)

    assert REQUEST_SHEET.first_data_row == 7
    assert [(r.request_no, r.row_index) for r in reqs] == [("REQ-001", 7), ("REQ-002", 9)]
    assert reqs[0].amount == 250.0


def test_parse_login_rows_keeps_deleted_flag(login_rows) -> None:
    users = parse_login_rows(login_rows + [["", "", "", "", ""]])

    assert [u.username for u in users] == ["alice", "root", "gone"]
    assert [u.deleted for u in users] == [False, False, True]
    assert users[0].row_index == 2


def test_parse_receiving_rows_requires_timestamp() -> None:
    rows = [
        ["Timestamp"],
        ["19/10/2026 09:00:00", "2026-10-19", "Acme", "1200", "INV-9", "Bank", "", "https://x"],
        ["", "2026-10-19", "Acme"],
    ]

    recs = parse_receiving_rows(rows)

    assert len(recs) == 1
    assert recs[0].invoice_amount == 1200.0
    assert recs[0].image_link == "https://x"
