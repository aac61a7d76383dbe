"""Payment requests: sequential numbering, pending/history buckets, bulk approval.

Request numbers are `REQ-NNN`, computed as max(existing) + 1. The sheet has no
uniqueness constraint, so creation is serialised through this service: the
sheet is re-read and the number computed inside a lock. Writers that bypass
the service (manual sheet edits, a second backend process) can still produce
duplicates.

Bulk approval is a sequence of independent row updates. There is no rollback:
if one call fails, the rows before it stay committed and the rows after it are
not attempted. The result lists both so the caller can tell what applied.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Iterable

from src.backend.ledger.integrations.row_store_client import RowStoreClient, RowStoreError
from src.backend.ledger.integrations.sheet_schema import (
    REQUEST_SHEET,
    RequestColumn,
    RequestRecord,
    blank_row,
    format_day_month_year,
    parse_request_rows,
    parse_sheet_timestamp,
)
from src.backend.ledger.use_cases.attachments import Attachment, upload_attachment

logger = logging.getLogger(__name__)

_REQUEST_NO = re.compile(r"REQ-(\d+)")


class RequestStatus(str, Enum):
    APPROVED = "Approved"
    REJECT = "Reject"


def request_number_value(request_no: str) -> int | None:
    m = _REQUEST_NO.search(request_no or "")
    return int(m.group(1)) if m else None


def format_request_number(n: int) -> str:
    return f"REQ-{n:03d}"


def next_request_number(existing: Iterable[str]) -> str:
    """max(existing numeric suffix) + 1, or REQ-001 when nothing parses."""

    nums = [n for n in (request_number_value(r) for r in existing) if n is not None]
    return format_request_number(max(nums) + 1 if nums else 1)


def sort_by_request_number(records: Iterable[RequestRecord]) -> list[RequestRecord]:
    return sorted(records, key=lambda r: request_number_value(r.request_no) or 0)


def newest_first(records: Iterable[RequestRecord]) -> list[RequestRecord]:
    def _key(r: RequestRecord) -> float:
        ts = parse_sheet_timestamp(r.timestamp)
        return ts.timestamp() if ts else 0.0

    return sorted(records, key=_key, reverse=True)


def matches_search(record: RequestRecord, term: str | None) -> bool:
    """True if any field's text contains `term` (case-insensitive)."""

    if not term:
        return True
    needle = term.lower()
    return any(needle in str(v).lower() for v in record.to_row() + [record.row_index])


def partition_requests(
    records: Iterable[RequestRecord],
) -> tuple[list[RequestRecord], list[RequestRecord]]:
    """Split into (pending, history); rows without a planned date are in neither."""

    pending: list[RequestRecord] = []
    history: list[RequestRecord] = []
    for r in records:
        if r.is_pending:
            pending.append(r)
        elif r.is_history:
            history.append(r)
    return pending, history


def decision_row(status: str, remarks: str, decided_on: date) -> list[str]:
    """Partial update: stamp the decision date, set status and remarks, touch nothing else."""

    row = blank_row(REQUEST_SHEET)
    row[RequestColumn.ACTUAL] = format_day_month_year(decided_on)
    row[RequestColumn.STATUS] = status
    row[RequestColumn.APPROVAL_REMARKS] = remarks
    return row


@dataclass(frozen=True, slots=True)
class RequestDraft:
    group_head: str
    pay_to: str
    amount: float
    remarks: str
    name: str
    department: str


@dataclass(frozen=True, slots=True)
class Decision:
    request_no: str
    status: RequestStatus
    remarks: str = ""


@dataclass(slots=True)
class BulkDecisionResult:
    requested: list[str]
    committed: list[str] = field(default_factory=list)
    failed: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.failed is None

    @property
    def not_attempted(self) -> list[str]:
        done = set(self.committed)
        if self.failed:
            done.add(self.failed)
        return [r for r in self.requested if r not in done]


class RequestLifecycleService:
    # Shared by every instance: one numbering authority per process.
    _creation_lock = threading.Lock()

    def __init__(self, *, row_store: RowStoreClient, attachment_folder_id: str = "") -> None:
        self._row_store = row_store
        self._attachment_folder_id = attachment_folder_id

    def list_requests(self) -> list[RequestRecord]:
        return parse_request_rows(self._row_store.fetch_rows(REQUEST_SHEET.name))

    def approval_queue(self) -> tuple[list[RequestRecord], list[RequestRecord]]:
        return partition_requests(newest_first(self.list_requests()))

    def create_request(
        self,
        draft: RequestDraft,
        *,
        attachment: Attachment | None = None,
        now: datetime | None = None,
    ) -> RequestRecord:
        now = now or datetime.now()
        attachment_url = upload_attachment(
            self._row_store,
            attachment,
            folder_id=self._attachment_folder_id,
            file_name=(
                f"REQ_{int(time.time() * 1000)}_{attachment.file_name}" if attachment else None
            ),
        )

        with self._creation_lock:
            rows = self._row_store.fetch_rows(REQUEST_SHEET.name)
            request_no = next_request_number(r.request_no for r in parse_request_rows(rows))
            record = RequestRecord(
                # Estimate only; replaced below with where the row actually landed.
                row_index=max(len(rows) + 1, REQUEST_SHEET.first_data_row),
                timestamp=now.strftime("%Y-%m-%d %H:%M:%S"),
                request_no=request_no,
                group_head=draft.group_head,
                pay_to=draft.pay_to,
                amount=draft.amount,
                remarks=draft.remarks,
                attachment=attachment_url,
                name=draft.name,
                department=draft.department,
            )
            self._row_store.insert_row(REQUEST_SHEET.name, record.to_row())
            record = self._locate_inserted(record)

        logger.info(f"Created request {request_no} for {draft.name}")
        return record

    def _locate_inserted(self, record: RequestRecord) -> RequestRecord:
        """Re-read the sheet to find the row the proxy appended `record` to.

        Rows holding only pre-filled formulas make the fetched grid longer than
        the data, so the pre-insert estimate can point past the real row.
        """

        try:
            rows = self._row_store.fetch_rows(REQUEST_SHEET.name)
        except RowStoreError as e:
            logger.warning(f"Inserted {record.request_no} but could not re-read its row: {e}")
            return record
        placed = [r for r in parse_request_rows(rows) if r.request_no == record.request_no]
        if not placed:
            logger.warning(f"Inserted {record.request_no} but it is not visible yet")
            return record
        return replace(record, row_index=placed[-1].row_index)

    def submit_decisions(
        self, decisions: list[Decision], *, today: date | None = None
    ) -> BulkDecisionResult:
        """Apply approver decisions to the selected pending requests, one call per row."""

        requested = [d.request_no for d in decisions]
        result = BulkDecisionResult(requested=requested)
        if not decisions:
            return result
        if len(set(requested)) != len(requested):
            raise ValueError("Each request may only be selected once")

        pending, _ = partition_requests(self.list_requests())
        by_number: dict[str, list[RequestRecord]] = {}
        for r in pending:
            by_number.setdefault(r.request_no, []).append(r)

        unknown = [n for n in requested if n not in by_number]
        if unknown:
            raise ValueError(f"Not pending or not found: {', '.join(unknown)}")

        decided_on = today or date.today()
        for d in decisions:
            row = decision_row(d.status.value, d.remarks, decided_on)
            try:
                for record in by_number[d.request_no]:
                    self._row_store.update_row(REQUEST_SHEET.name, record.row_index, row)
            except (RowStoreError, ValueError) as e:
                logger.error(f"Bulk approval stopped at {d.request_no}: {e}")
                result.failed = d.request_no
                result.error = str(e)
                return result
            result.committed.append(d.request_no)

        logger.info(f"Bulk approval committed {len(result.committed)} request(s)")
        return result
