"""In-memory row store and sheet fixtures for ledger tests."""

from __future__ import annotations

import threading
from typing import Any

from src.backend.ledger.integrations.row_store_client import RowStoreError, UploadedFile


class FakeRowStore:
    """In-memory stand-in for `RowStoreClient` that applies the proxy's update rules."""

    def __init__(self, sheets: dict[str, list[list[Any]]] | None = None) -> None:
        self.sheets = {k: [list(r) for r in v] for k, v in (sheets or {}).items()}
        self.calls: list[tuple] = []
        self.uploads: list[dict[str, str]] = []
        self.fail_fetch: set[str] = set()
        self.fail_update_rows: set[int] = set()
        self.fetch_delay = 0.0
        self._lock = threading.Lock()

    def fetch_rows(self, sheet: str) -> list[list[Any]]:
        if self.fetch_delay:
            threading.Event().wait(self.fetch_delay)
        with self._lock:
            self.calls.append(("fetch", sheet))
            if sheet in self.fail_fetch:
                raise RowStoreError(f"fetch {sheet}: HTTP 500: boom")
            return [list(r) for r in self.sheets.get(sheet, [])]

    def insert_row(self, sheet: str, row: list[Any]) -> None:
        with self._lock:
            self.calls.append(("insert", sheet, list(row)))
            self.sheets.setdefault(sheet, []).append(list(row))

    def update_row(self, sheet: str, row_index: int, row: list[Any]) -> None:
        with self._lock:
            self.calls.append(("update", sheet, row_index, list(row)))
            if row_index in self.fail_update_rows:
                raise RowStoreError(f"update {sheet} row {row_index}: quota exceeded")
            rows = self.sheets.setdefault(sheet, [])
            while len(rows) < row_index:
                rows.append([])
            target = rows[row_index - 1]
            for i, v in enumerate(row):
                if v == "":
                    continue
                while len(target) <= i:
                    target.append("")
                target[i] = v

    def upload_file(self, *, file_name: str, base64_data: str, mime_type: str, folder_id: str) -> UploadedFile:
        with self._lock:
            self.uploads.append(
                {"file_name": file_name, "mime_type": mime_type, "folder_id": folder_id}
            )
        return UploadedFile(file_name=file_name, file_url=f"https://drive.test/{file_name}")

    def calls_of(self, kind: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == kind]


LOGIN_HEADER = ["Full Name", "Username", "Password", "Role", "Pages", "Deleted"]
DATA_HEADER = [
    "Timestamp", "Person Name", "Date", "Incoming", "Outgoing",
    "Mode", "Group Head", "Reason", "Attachment", "Month",
]
REQUEST_HEADER_ROWS = [["Payment Requests"], [], [], [], [], ["Timestamp", "Request No"]]


def request_row(
    request_no: str,
    *,
    planned: str = "",
    actual: str = "",
    timestamp: str = "2026-10-01 09:00:00",
    name: str = "alice",
) -> list[Any]:
    return [
        timestamp, request_no, "Travel", "Metro Cabs", 250, "airport run", "",
        name, "Ops", planned, actual, "", "", "",
    ]


