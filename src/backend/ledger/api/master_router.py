"""Dropdown vocabularies from the Master sheet."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.backend.ledger.api.dependencies import current_session, get_master_service, require_page
from src.backend.ledger.use_cases.identity import Session
from src.backend.ledger.use_cases.master_data import MasterDataService

logger = logging.getLogger(__name__)

master_router = APIRouter(prefix="/master", tags=["Master Data"])


class NewOption(BaseModel):
    vocabulary: str
    value: str


@master_router.get("/options")
def options(
    session: Session = Depends(current_session),
    service: MasterDataService = Depends(get_master_service),
):
    return service.options()


@master_router.post("/options", status_code=201)
def add_option(
    body: NewOption,
    session: Session = Depends(require_page("form", "receiving", "request")),
    service: MasterDataService = Depends(get_master_service),
):
    try:
        write = service.add_option(body.vocabulary, body.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "vocabulary": body.vocabulary,
        "value": body.value.strip(),
        "row_index": write.row_index,
        "options": service.options(),
    }
