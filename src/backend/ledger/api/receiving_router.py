"""Receiving (vendor invoice) entries."""

import datetime as dt
import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.backend.ledger.api.dependencies import get_entry_service, require_page
from src.backend.ledger.api.models import AttachmentIn
from src.backend.ledger.use_cases.entry_forms import EntryFormService, ReceivingDraft
from src.backend.ledger.use_cases.identity import Session

logger = logging.getLogger(__name__)

receiving_router = APIRouter(prefix="/receiving", tags=["Receiving"])


class ReceivingCreate(BaseModel):
    date: dt.date
    vendor: str = Field(min_length=1)
    invoice_amount: float
    invoice_number: str = Field(min_length=1)
    mode: str = Field(min_length=1)
    remarks: str = ""
    image: AttachmentIn | None = None


@receiving_router.get("")
def list_receiving(
    session: Session = Depends(require_page("receiving")),
    service: EntryFormService = Depends(get_entry_service),
):
    return {"records": [asdict(r) for r in service.list_receiving()]}


@receiving_router.post("", status_code=201)
def create_receiving(
    body: ReceivingCreate,
    session: Session = Depends(require_page("receiving")),
    service: EntryFormService = Depends(get_entry_service),
):
    draft = ReceivingDraft(
        date=body.date,
        vendor=body.vendor,
        invoice_amount=body.invoice_amount,
        invoice_number=body.invoice_number,
        mode=body.mode,
        remarks=body.remarks,
    )
    try:
        record = service.add_receiving(
            draft, image=body.image.to_attachment() if body.image else None
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return asdict(record)
