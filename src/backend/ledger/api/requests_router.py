"""Payment request and approval endpoints."""

import logging
from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.backend.ledger.api.dependencies import get_request_service, require_page
from src.backend.ledger.api.models import AttachmentIn
from src.backend.ledger.integrations.sheet_schema import RequestRecord
from src.backend.ledger.use_cases.identity import Session
from src.backend.ledger.use_cases.request_lifecycle import (
    Decision,
    RequestDraft,
    RequestLifecycleService,
    RequestStatus,
    matches_search,
    sort_by_request_number,
)

logger = logging.getLogger(__name__)

requests_router = APIRouter(tags=["Requests"])


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------


class RequestCreate(BaseModel):
    group_head: str = Field(min_length=1)
    pay_to: str = Field(min_length=1)
    amount: float = 0.0
    remarks: str = ""
    name: str | None = None
    department: str = ""
    attachment: AttachmentIn | None = None


class DecisionIn(BaseModel):
    request_no: str = Field(min_length=1)
    status: RequestStatus
    remarks: str = ""


class BulkDecisionRequest(BaseModel):
    decisions: list[DecisionIn]


def request_to_dict(r: RequestRecord) -> dict[str, Any]:
    return asdict(r)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@requests_router.get("/requests")
def list_requests(
    q: str | None = None,
    session: Session = Depends(require_page("request")),
    service: RequestLifecycleService = Depends(get_request_service),
):
    records = sort_by_request_number(service.list_requests())
    return {"requests": [request_to_dict(r) for r in records if matches_search(r, q)]}


@requests_router.post("/requests", status_code=201)
def create_request(
    body: RequestCreate,
    session: Session = Depends(require_page("request")),
    service: RequestLifecycleService = Depends(get_request_service),
):
    draft = RequestDraft(
        group_head=body.group_head,
        pay_to=body.pay_to,
        amount=body.amount,
        remarks=body.remarks,
        name=(body.name or session.user.name).strip(),
        department=body.department,
    )
    try:
        record = service.create_request(
            draft,
            attachment=body.attachment.to_attachment() if body.attachment else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return request_to_dict(record)


@requests_router.get("/approvals")
def approval_queue(
    q: str | None = None,
    session: Session = Depends(require_page("approval")),
    service: RequestLifecycleService = Depends(get_request_service),
):
    """Pending (planned, no actual) and history (planned and actual) requests."""

    pending, history = service.approval_queue()
    return {
        "pending": [request_to_dict(r) for r in pending if matches_search(r, q)],
        "history": [request_to_dict(r) for r in history if matches_search(r, q)],
    }


@requests_router.post("/approvals/submit")
def submit_approvals(
    body: BulkDecisionRequest,
    session: Session = Depends(require_page("approval")),
    service: RequestLifecycleService = Depends(get_request_service),
):
    """Apply Approved/Reject decisions to the selected pending requests.

    Rows are updated one at a time. On failure the response is 502 and lists
    what was committed before the failing row; nothing is rolled back.
    """

    decisions = [
        Decision(request_no=d.request_no.strip(), status=d.status, remarks=d.remarks)
        for d in body.decisions
    ]
    try:
        result = service.submit_decisions(decisions)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        f"{session.user.id} submitted {len(decisions)} decision(s); "
        f"committed={len(result.committed)} failed={result.failed}"
    )
    payload = {
        "ok": result.ok,
        "requested": result.requested,
        "committed": result.committed,
        "failed": result.failed,
        "not_attempted": result.not_attempted,
        "error": result.error,
    }
    if not result.ok:
        return JSONResponse(status_code=502, content=payload)
    return payload
