"""User management over the Login sheet (admin only).

Users are never removed: deleting writes a sentinel into the last column.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.backend.ledger.integrations.row_store_client import RowStoreClient
from src.backend.ledger.integrations.sheet_schema import (
    LOGIN_SHEET,
    SOFT_DELETE_SENTINEL,
    LoginColumn,
    LoginRecord,
    blank_row,
    parse_login_rows,
)

logger = logging.getLogger(__name__)

# Page names as shown (and stored) in the Login sheet.
AVAILABLE_PAGES: tuple[str, ...] = (
    "Dashboard",
    "Request",
    "Approval",
    "Add New Transaction",
    "Receive Entry",
    "Reports",
)


def normalise_page_names(pages: list[str] | str) -> list[str]:
    """Match names to the catalogue ignoring case; unknown names pass through trimmed."""

    raw = pages.split(",") if isinstance(pages, str) else pages
    out: list[str] = []
    for p in raw:
        trimmed = p.strip()
        if not trimmed:
            continue
        matched = next((a for a in AVAILABLE_PAGES if a.lower() == trimmed.lower()), trimmed)
        if matched not in out:
            out.append(matched)
    return out


@dataclass(frozen=True, slots=True)
class ManagedUser:
    row_index: int
    name: str
    username: str
    password: str
    role: str
    pages: list[str]

    @classmethod
    def from_record(cls, r: LoginRecord) -> "ManagedUser":
        return cls(
            row_index=r.row_index,
            name=r.full_name,
            username=r.username,
            password=r.password,
            role="admin" if r.role.strip().lower() == "admin" else "user",
            pages=normalise_page_names(r.pages),
        )


@dataclass(frozen=True, slots=True)
class UserForm:
    name: str
    username: str
    password: str
    role: str
    pages: list[str]

    @property
    def is_admin(self) -> bool:
        return self.role.strip().lower() == "admin"

    def to_row(self) -> list[str]:
        """Login row for this form.

        On update a blank cell means "leave unchanged", so an empty name keeps
        the stored one. Empty page lists are rejected by `update_user` instead.
        """

        role = "admin" if self.is_admin else "user"
        return [
            self.name.strip(),
            self.username.strip(),
            self.password.strip(),
            role,
            ", ".join(normalise_page_names(self.pages)),
        ]


def soft_delete_row() -> list[str]:
    row = blank_row(LOGIN_SHEET)
    row[LoginColumn.DELETED] = SOFT_DELETE_SENTINEL
    return row


def _check_username_free(
    form: UserForm, records: list[LoginRecord], *, editing_row: int | None = None
) -> None:
    username = form.username.strip()
    if not username or not form.password.strip():
        raise ValueError("Username and password are required")
    for r in records:
        if r.deleted or r.row_index == editing_row:
            continue
        if r.username == username:
            raise ValueError(f"Username {username!r} already exists")


class UserAdminService:
    def __init__(self, *, row_store: RowStoreClient) -> None:
        self._row_store = row_store

    def _records(self) -> list[LoginRecord]:
        return parse_login_rows(self._row_store.fetch_rows(LOGIN_SHEET.name))

    def list_users(self) -> list[ManagedUser]:
        return [ManagedUser.from_record(r) for r in self._records() if not r.deleted]

    def _require_row(self, row_index: int, records: list[LoginRecord] | None = None) -> LoginRecord:
        for r in self._records() if records is None else records:
            if r.row_index == row_index and not r.deleted:
                return r
        raise LookupError(f"No active user at Login row {row_index}")

    def add_user(self, form: UserForm) -> None:
        _check_username_free(form, self._records())
        self._row_store.insert_row(LOGIN_SHEET.name, form.to_row())
        logger.info(f"Added user {form.username.strip()}")

    def update_user(self, row_index: int, form: UserForm) -> None:
        records = self._records()
        self._require_row(row_index, records)
        if not form.is_admin and not normalise_page_names(form.pages):
            raise ValueError("A user needs at least one page")
        _check_username_free(form, records, editing_row=row_index)
        self._row_store.update_row(LOGIN_SHEET.name, row_index, form.to_row())
        logger.info(f"Updated user at Login row {row_index}")

    def delete_user(self, row_index: int) -> None:
        self._require_row(row_index)
        self._row_store.update_row(LOGIN_SHEET.name, row_index, soft_delete_row())
        logger.info(f"Soft-deleted user at Login row {row_index}")
