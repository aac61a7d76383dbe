"""Append-only entry forms: transactions (Data sheet) and receiving entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from src.backend.ledger.integrations.row_store_client import RowStoreClient
from src.backend.ledger.integrations.sheet_schema import (
    DATA_SHEET,
    RECEIVING_SHEET,
    ReceivingRecord,
    TransactionRecord,
    format_month_label,
    parse_receiving_rows,
    parse_sheet_timestamp,
    parse_transaction_rows,
)
from src.backend.ledger.use_cases.attachments import Attachment, upload_attachment

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TransactionDraft:
    person_name: str
    date: date
    incoming: float
    outgoing: float
    mode: str
    group_head: str
    reason: str


@dataclass(frozen=True, slots=True)
class ReceivingDraft:
    date: date
    vendor: str
    invoice_amount: float
    invoice_number: str
    mode: str
    remarks: str = ""


def build_transaction(draft: TransactionDraft, *, attachment_url: str, now: datetime) -> TransactionRecord:
    return TransactionRecord(
        timestamp=now.strftime("%d/%m/%Y %H:%M:%S"),
        person_name=draft.person_name,
        date=draft.date,
        incoming=draft.incoming,
        outgoing=draft.outgoing,
        mode=draft.mode,
        group_head=draft.group_head,
        reason=draft.reason,
        attachment=attachment_url,
        # Label follows the submission time, not the transaction date.
        month_label=format_month_label(now.date()),
    )


def build_receiving(draft: ReceivingDraft, *, image_link: str, now: datetime) -> ReceivingRecord:
    return ReceivingRecord(
        timestamp=now.strftime("%d/%m/%Y %H:%M:%S"),
        date=draft.date.isoformat(),
        vendor=draft.vendor,
        invoice_amount=draft.invoice_amount,
        invoice_number=draft.invoice_number,
        mode=draft.mode,
        remarks=draft.remarks,
        image_link=image_link,
    )


class EntryFormService:
    def __init__(
        self,
        *,
        row_store: RowStoreClient,
        transaction_folder_id: str = "",
        receiving_folder_id: str = "",
    ) -> None:
        self._row_store = row_store
        self._transaction_folder_id = transaction_folder_id
        self._receiving_folder_id = receiving_folder_id

    def list_transactions(self) -> list[TransactionRecord]:
        return parse_transaction_rows(self._row_store.fetch_rows(DATA_SHEET.name))

    def add_transaction(
        self,
        draft: TransactionDraft,
        *,
        attachment: Attachment | None = None,
        now: datetime | None = None,
    ) -> TransactionRecord:
        link = upload_attachment(
            self._row_store, attachment, folder_id=self._transaction_folder_id
        )
        record = build_transaction(draft, attachment_url=link, now=now or datetime.now())
        self._row_store.insert_row(DATA_SHEET.name, record.to_row())
        logger.info(f"Recorded transaction for {draft.person_name} on {draft.date.isoformat()}")
        return record

    def list_receiving(self) -> list[ReceivingRecord]:
        records = parse_receiving_rows(self._row_store.fetch_rows(RECEIVING_SHEET.name))

        def _key(r: ReceivingRecord) -> float:
            ts = parse_sheet_timestamp(r.timestamp)
            return ts.timestamp() if ts else 0.0

        return sorted(records, key=_key, reverse=True)

    def add_receiving(
        self,
        draft: ReceivingDraft,
        *,
        image: Attachment | None = None,
        now: datetime | None = None,
    ) -> ReceivingRecord:
        link = upload_attachment(self._row_store, image, folder_id=self._receiving_folder_id)
        record = build_receiving(draft, image_link=link, now=now or datetime.now())
        self._row_store.insert_row(RECEIVING_SHEET.name, record.to_row())
        logger.info(f"Recorded receiving entry {draft.invoice_number} from {draft.vendor}")
        return record
