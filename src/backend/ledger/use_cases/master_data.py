"""Master sheet vocabularies (dropdown options) and new-option insertion.

The Master sheet holds unrelated vocabularies side by side, one per column.
Adding a value writes the row just below the last filled cell of that column,
rewriting the row's other tracked columns with what is already there so the
neighbouring vocabularies survive.

The write is a read-modify-write by absolute row index. It is serialised
inside this process only; two writers elsewhere can still pick the same row.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

from src.backend.ledger.integrations.row_store_client import RowStoreClient
from src.backend.ledger.integrations.sheet_schema import MASTER_SHEET, MasterColumn, cell

logger = logging.getLogger(__name__)

# Request-facing names for each vocabulary.
VOCABULARIES: dict[str, MasterColumn] = {
    "personNames": MasterColumn.PERSON_NAME,
    "modes": MasterColumn.MODE,
    "groupHeads": MasterColumn.GROUP_HEAD,
    "vendors": MasterColumn.VENDOR,
    "reasons": MasterColumn.REASON,
    "departments": MasterColumn.DEPARTMENT,
}

_TRACKED_WIDTH = max(int(c) for c in MasterColumn) + 1


def build_options(rows: list[list[Any]]) -> dict[str, list[str]]:
    """Trimmed, de-duplicated, non-empty values per vocabulary (first-seen order)."""

    out: dict[str, list[str]] = {name: [] for name in VOCABULARIES}
    seen: dict[str, set[str]] = {name: set() for name in VOCABULARIES}
    for row in rows[MASTER_SHEET.header_rows:]:
        for name, col in VOCABULARIES.items():
            value = cell(row, col).strip()
            if value and value not in seen[name]:
                seen[name].add(value)
                out[name].append(value)
    return out


@dataclass(frozen=True, slots=True)
class OptionWrite:
    row_index: int
    row: list[str]


def plan_option_write(rows: list[list[Any]], column: MasterColumn, value: str) -> OptionWrite:
    """Work out which row receives `value` and what to write there."""

    value = (value or "").strip()
    if not value:
        raise ValueError("Option value cannot be empty")

    last_filled = 0
    for i, row in enumerate(rows):
        if cell(row, column).strip():
            last_filled = i
    target = last_filled + 1

    if target < len(rows):
        existing = rows[target]
        new_row = [cell(existing, i) for i in range(_TRACKED_WIDTH)]
    else:
        new_row = [""] * _TRACKED_WIDTH
    new_row[column] = value

    # Sheet rows are 1-based.
    return OptionWrite(row_index=target + 1, row=new_row)


class MasterDataService:
    _write_lock = threading.Lock()

    def __init__(self, *, row_store: RowStoreClient) -> None:
        self._row_store = row_store

    def options(self) -> dict[str, list[str]]:
        return build_options(self._row_store.fetch_rows(MASTER_SHEET.name))

    def add_option(self, vocabulary: str, value: str) -> OptionWrite:
        column = VOCABULARIES.get(vocabulary)
        if column is None:
            raise ValueError(
                f"Unknown vocabulary {vocabulary!r}; expected one of {sorted(VOCABULARIES)}"
            )
        with self._write_lock:
            rows = self._row_store.fetch_rows(MASTER_SHEET.name)
            write = plan_option_write(rows, column, value)
            self._row_store.update_row(MASTER_SHEET.name, write.row_index, write.row)
        logger.info(f"Added {vocabulary} option at Master row {write.row_index}")
        return write
