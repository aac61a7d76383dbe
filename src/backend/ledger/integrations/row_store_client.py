"""Row store connector (spreadsheet proxy).

Purpose
- Provide a small, testable wrapper around the single HTTP proxy endpoint that
  fronts the spreadsheet: fetch / insert / update / uploadFile.
- Keep every network call here; record parsing lives in `sheet_schema`.

This module is intentionally independent of FastAPI.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence

import requests

from src.backend.ledger.config.settings import LedgerSettings

logger = logging.getLogger(__name__)


class RowStoreError(RuntimeError):
    """Network failure, malformed response, or `success: false` from the proxy."""


@dataclass(frozen=True, slots=True)
class UploadedFile:
    file_name: str
    file_url: str


def _cell_to_wire(value: Any) -> Any:
    if value is None:
        return ""
    return value


class RowStoreClient:
    def __init__(self, *, base_url: str, timeout_seconds: int = 30) -> None:
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: LedgerSettings) -> "RowStoreClient":
        return cls(
            base_url=settings.row_store_url,
            timeout_seconds=settings.http_timeout_seconds,
        )

    @classmethod
    def from_env(cls) -> "RowStoreClient":
        return cls.from_settings(LedgerSettings.from_env())

    @property
    def base_url(self) -> str:
        return self._base_url

    def _request_json(
        self,
        method: str,
        *,
        what: str,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        try:
            resp = requests.request(
                method,
                self._base_url,
                params=params,
                data=data,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as e:
            raise RowStoreError(f"{what}: request failed: {e}") from e

        logger.debug("%s %s -> %s", method, what, resp.status_code)

        if resp.status_code >= 400:
            raise RowStoreError(f"{what}: HTTP {resp.status_code}: {resp.text}")
        try:
            payload = resp.json()
        except ValueError as e:
            raise RowStoreError(f"{what}: response is not JSON") from e
        if not isinstance(payload, dict):
            raise RowStoreError(f"{what}: unexpected response shape")
        if not payload.get("success"):
            raise RowStoreError(f"{what}: {payload.get('error') or 'operation failed'}")
        return payload

    def fetch_rows(self, sheet: str) -> list[list[Any]]:
        """Return every row of `sheet`, header rows included."""

        payload = self._request_json(
            "GET",
            what=f"fetch {sheet}",
            params={"sheet": sheet, "action": "fetch"},
        )
        rows = payload.get("data")
        if not isinstance(rows, list):
            raise RowStoreError(f"fetch {sheet}: data is not a list of rows")
        return [r if isinstance(r, list) else [] for r in rows]

    def insert_row(self, sheet: str, row: Sequence[Any]) -> None:
        logger.info("Inserting row into %s", sheet)
        self._request_json(
            "POST",
            what=f"insert {sheet}",
            data={
                "action": "insert",
                "sheetName": sheet,
                "rowData": json.dumps([_cell_to_wire(v) for v in row]),
            },
        )

    def update_row(self, sheet: str, row_index: int, row: Sequence[Any]) -> None:
        """Overwrite the non-empty positions of `row` at 1-based `row_index`.

        An empty string leaves the existing cell untouched (proxy convention).
        """

        if row_index < 1:
            raise ValueError("row_index must be >= 1")
        logger.info("Updating %s row %d", sheet, row_index)
        self._request_json(
            "POST",
            what=f"update {sheet} row {row_index}",
            data={
                "action": "update",
                "sheetName": sheet,
                "rowIndex": str(row_index),
                "rowData": json.dumps([_cell_to_wire(v) for v in row]),
            },
        )

    def upload_file(
        self,
        *,
        file_name: str,
        base64_data: str,
        mime_type: str,
        folder_id: str,
    ) -> UploadedFile:
        if not folder_id:
            raise ValueError("No upload folder configured")
        if not base64_data:
            raise ValueError("Attachment has no data")

        logger.info("Uploading %s (%s)", file_name, mime_type)
        payload = self._request_json(
            "POST",
            what=f"upload {file_name}",
            data={
                "action": "uploadFile",
                "fileName": file_name,
                "base64Data": base64_data,
                "mimeType": mime_type,
                "folderId": folder_id,
            },
        )
        file_url = payload.get("fileUrl")
        if not file_url:
            raise RowStoreError(f"upload {file_name}: response has no fileUrl")
        return UploadedFile(file_name=file_name, file_url=str(file_url))
