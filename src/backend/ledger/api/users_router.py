"""User management (Login sheet). Admin only."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.backend.ledger.api.dependencies import get_user_admin_service, require_page
from src.backend.ledger.use_cases.identity import Session
from src.backend.ledger.use_cases.user_admin import AVAILABLE_PAGES, UserAdminService, UserForm

logger = logging.getLogger(__name__)

users_router = APIRouter(prefix="/users", tags=["Users"])


class UserIn(BaseModel):
    name: str = ""
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: str = "user"
    pages: list[str] = []

    def to_form(self) -> UserForm:
        return UserForm(
            name=self.name,
            username=self.username,
            password=self.password,
            role=self.role,
            pages=self.pages,
        )


@users_router.get("")
def list_users(
    session: Session = Depends(require_page("users")),
    service: UserAdminService = Depends(get_user_admin_service),
):
    return {
        "available_pages": list(AVAILABLE_PAGES),
        "users": [asdict(u) for u in service.list_users()],
    }


@users_router.post("", status_code=201)
def add_user(
    body: UserIn,
    session: Session = Depends(require_page("users")),
    service: UserAdminService = Depends(get_user_admin_service),
):
    try:
        service.add_user(body.to_form())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "created"}


@users_router.put("/{row_index}")
def update_user(
    row_index: int,
    body: UserIn,
    session: Session = Depends(require_page("users")),
    service: UserAdminService = Depends(get_user_admin_service),
):
    try:
        service.update_user(row_index, body.to_form())
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "updated"}


@users_router.delete("/{row_index}")
def delete_user(
    row_index: int,
    session: Session = Depends(require_page("users")),
    service: UserAdminService = Depends(get_user_admin_service),
):
    try:
        service.delete_user(row_index)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    logger.info(f"{session.user.id} deleted Login row {row_index}")
    return {"status": "deleted"}
