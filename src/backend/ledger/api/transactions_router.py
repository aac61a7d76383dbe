"""Dashboard, reports and transaction entry endpoints.

Every call re-reads the Data sheet; filtering and grouping happen per request
for the calling user's visibility.
"""

import datetime as dt
import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from src.backend.ledger.api.dependencies import get_entry_service, require_page
from src.backend.ledger.api.models import AttachmentIn
from src.backend.ledger.integrations.sheet_schema import TransactionRecord
from src.backend.ledger.use_cases.entry_forms import EntryFormService, TransactionDraft
from src.backend.ledger.use_cases.identity import Session
from src.backend.ledger.use_cases.transaction_aggregator import (
    ALL,
    GroupDimension,
    GroupSummary,
    TransactionFilters,
    apply_filters,
    build_dashboard,
    build_reports,
    members_of_group,
    totals,
    visible_transactions,
)

logger = logging.getLogger(__name__)

transactions_router = APIRouter(tags=["Transactions"])


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------


class TransactionCreate(BaseModel):
    person_name: str | None = None
    date: dt.date
    incoming: float = 0.0
    outgoing: float = 0.0
    mode: str = Field(min_length=1)
    group_head: str = Field(min_length=1)
    reason: str = ""
    attachment: AttachmentIn | None = None


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------


def transaction_filters(
    date_from: str = "",
    date_to: str = "",
    person_name: str = ALL,
    group_head: str = ALL,
    mode: str = ALL,
    reason: str = ALL,
) -> TransactionFilters:
    return TransactionFilters(
        date_from=date_from,
        date_to=date_to,
        person_name=person_name,
        group_head=group_head,
        mode=mode,
        reason=reason,
    )


def transaction_to_dict(t: TransactionRecord) -> dict[str, Any]:
    return {
        "row_index": t.row_index,
        "timestamp": t.timestamp,
        "person_name": t.person_name,
        "date": t.iso_date,
        "incoming": t.incoming,
        "outgoing": t.outgoing,
        "mode": t.mode,
        "group_head": t.group_head,
        "reason": t.reason,
        "attachment": t.attachment,
        "month_label": t.month_label,
    }


def group_to_dict(g: GroupSummary) -> dict[str, Any]:
    return {
        "key": g.key,
        "incoming": g.incoming,
        "outgoing": g.outgoing,
        "count": g.count,
        "balance": g.balance,
    }


def _filtered(
    service: EntryFormService, session: Session, filters: TransactionFilters
) -> list[TransactionRecord]:
    return apply_filters(visible_transactions(service.list_transactions(), session.user), filters)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@transactions_router.get("/dashboard")
def dashboard(
    filters: TransactionFilters = Depends(transaction_filters),
    session: Session = Depends(require_page("dashboard")),
    service: EntryFormService = Depends(get_entry_service),
):
    rows = _filtered(service, session, filters)
    board = build_dashboard(rows)
    return {
        "filters": asdict(filters),
        "totals": {
            "incoming": board.totals.incoming,
            "outgoing": board.totals.outgoing,
            "balance": board.totals.balance,
            "count": board.totals.count,
        },
        "time_series": [asdict(p) for p in board.series],
        "expense_by_group_head": [
            {"name": g.key, "value": g.outgoing} for g in board.expense_by_group_head
        ],
        "recent": [transaction_to_dict(t) for t in board.recent],
    }


@transactions_router.get("/reports")
def reports(
    filters: TransactionFilters = Depends(transaction_filters),
    session: Session = Depends(require_page("reports")),
    service: EntryFormService = Depends(get_entry_service),
):
    rows = _filtered(service, session, filters)
    cards = build_reports(rows, session.user)
    return {
        "filters": asdict(filters),
        "cards": {dim.value: [group_to_dict(g) for g in groups] for dim, groups in cards.items()},
    }


@transactions_router.get("/reports/detail")
def report_detail(
    dimension: GroupDimension = Query(...),
    key: str = Query(...),
    filters: TransactionFilters = Depends(transaction_filters),
    session: Session = Depends(require_page("reports")),
    service: EntryFormService = Depends(get_entry_service),
):
    """The exact transactions behind one report group."""

    if dimension is GroupDimension.PERSON and not session.user.is_admin:
        raise HTTPException(status_code=403, detail="Person-wise analysis is admin only")

    members = members_of_group(_filtered(service, session, filters), dimension, key)
    sums = totals(members)
    return {
        "dimension": dimension.value,
        "key": key,
        "totals": {
            "incoming": sums.incoming,
            "outgoing": sums.outgoing,
            "balance": sums.balance,
            "count": sums.count,
        },
        "transactions": [transaction_to_dict(t) for t in members],
    }


@transactions_router.post("/transactions", status_code=201)
def create_transaction(
    body: TransactionCreate,
    session: Session = Depends(require_page("form")),
    service: EntryFormService = Depends(get_entry_service),
):
    draft = TransactionDraft(
        person_name=(body.person_name or session.user.name).strip(),
        date=body.date,
        incoming=body.incoming,
        outgoing=body.outgoing,
        mode=body.mode,
        group_head=body.group_head,
        reason=body.reason,
    )
    try:
        record = service.add_transaction(
            draft,
            attachment=body.attachment.to_attachment() if body.attachment else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return transaction_to_dict(record)
