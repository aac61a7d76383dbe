"""Login, role resolution and server-side sessions.

Credentials are plaintext rows in the Login sheet. A successful login creates
an explicit `Session` held by `SessionStore`; nothing is trusted on the client.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable

from src.backend.ledger.integrations.row_store_client import RowStoreClient
from src.backend.ledger.integrations.sheet_schema import (
    LOGIN_SHEET,
    LoginRecord,
    parse_login_rows,
)

logger = logging.getLogger(__name__)

ALL_PAGES: tuple[str, ...] = (
    "dashboard",
    "request",
    "approval",
    "form",
    "receiving",
    "reports",
    "users",
)

# Page names as typed into the Login sheet -> internal page keys.
PAGE_NAME_MAPPING: dict[str, str] = {
    "dashboard": "dashboard",
    "request": "request",
    "approval": "approval",
    "add new transaction": "form",
    "reports": "reports",
    "repots": "reports",
    "receive entry": "receiving",
    "receiving": "receiving",
}

MISSING_CREDENTIALS = "Please enter both Username and Password"
INVALID_CREDENTIALS = "Invalid Username or Password"


class AuthenticationError(Exception):
    """Login or session validation failed. The message is safe to show."""


@dataclass(frozen=True, slots=True)
class AppUser:
    id: str
    name: str
    password: str
    role: str
    pages: tuple[str, ...]

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def can_access(self, page: str) -> bool:
        return page in self.pages

    def public_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "role": self.role, "pages": list(self.pages)}


def parse_page_list(pages: str | None) -> tuple[str, ...]:
    """Map a comma-separated page list to page keys (unknown dropped, deduped)."""

    out: list[str] = []
    for raw in (pages or "").split(","):
        key = PAGE_NAME_MAPPING.get(raw.strip().lower())
        if key and key not in out:
            out.append(key)
    return tuple(out)


def resolve_role_and_pages(role: str | None, pages: str | None) -> tuple[str, tuple[str, ...]]:
    if (role or "").strip().lower() == "admin":
        return "admin", ALL_PAGES
    return "user", parse_page_list(pages)


def user_from_login_record(record: LoginRecord) -> AppUser:
    role, pages = resolve_role_and_pages(record.role, record.pages)
    return AppUser(
        id=record.username,
        name=record.username,
        password=record.password,
        role=role,
        pages=pages,
    )


def match_credentials(
    users: Iterable[AppUser], username: str, password: str
) -> AppUser:
    """Return the first user whose username and password match exactly.

    Both submitted values are trimmed; comparison is case-sensitive.
    """

    u = (username or "").strip()
    p = (password or "").strip()
    if not u or not p:
        raise AuthenticationError(MISSING_CREDENTIALS)
    for user in users:
        if user.id == u and user.password == p:
            return user
    raise AuthenticationError(INVALID_CREDENTIALS)


def active_users(rows: list[list[Any]]) -> list[AppUser]:
    return [user_from_login_record(r) for r in parse_login_rows(rows) if not r.deleted]


@dataclass(slots=True)
class Session:
    token: str
    user: AppUser
    created_at: float
    validated_at: float = field(default=0.0)
    last_used: float = field(default=0.0)


DEFAULT_MAX_IDLE_SECONDS = 12 * 60 * 60


class SessionStore:
    """In-memory token -> Session map. A restart logs everybody out.

    Sessions unused for longer than `max_idle_seconds` are dropped the next
    time any session is created or looked up.
    """

    def __init__(
        self,
        *,
        max_idle_seconds: int = DEFAULT_MAX_IDLE_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()
        self._max_idle_seconds = max_idle_seconds
        self._clock = clock

    def _prune(self, now: float) -> None:
        # Caller holds the lock.
        expired = [t for t, s in self._sessions.items() if now - s.last_used > self._max_idle_seconds]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info(f"Pruned {len(expired)} idle session(s)")

    def create(self, user: AppUser) -> Session:
        now = self._clock()
        session = Session(
            token=secrets.token_urlsafe(32),
            user=user,
            created_at=now,
            validated_at=now,
            last_used=now,
        )
        with self._lock:
            self._prune(now)
            self._sessions[session.token] = session
        return session

    def get(self, token: str) -> Session | None:
        now = self._clock()
        with self._lock:
            self._prune(now)
            session = self._sessions.get(token)
            if session is not None:
                session.last_used = now
            return session

    def replace_user(self, token: str, user: AppUser) -> Session | None:
        with self._lock:
            current = self._sessions.get(token)
            if current is None:
                return None
            updated = replace(current, user=user, validated_at=self._clock())
            self._sessions[token] = updated
            return updated

    def drop(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class IdentityService:
    def __init__(
        self,
        *,
        row_store: RowStoreClient,
        sessions: SessionStore,
        revalidate_seconds: int = 300,
    ) -> None:
        self._row_store = row_store
        self._sessions = sessions
        self._revalidate_seconds = revalidate_seconds

    def load_users(self) -> list[AppUser]:
        return active_users(self._row_store.fetch_rows(LOGIN_SHEET.name))

    def login(self, username: str, password: str) -> Session:
        # Validate the form before touching the sheet.
        if not (username or "").strip() or not (password or "").strip():
            raise AuthenticationError(MISSING_CREDENTIALS)
        user = match_credentials(self.load_users(), username, password)
        session = self._sessions.create(user)
        logger.info(f"Login succeeded for {user.id} (role={user.role})")
        return session

    def logout(self, token: str) -> None:
        self._sessions.drop(token)

    def resolve(self, token: str | None) -> Session:
        """Look up a session, re-validating it against Login when stale."""

        if not token:
            raise AuthenticationError("Not logged in")
        session = self._sessions.get(token)
        if session is None:
            raise AuthenticationError("Session expired; please log in again")

        if time.time() - session.validated_at < self._revalidate_seconds:
            return session

        try:
            fresh = match_credentials(
                self.load_users(), session.user.id, session.user.password
            )
        except AuthenticationError:
            logger.info(f"Session for {session.user.id} failed re-validation")
            self._sessions.drop(token)
            raise AuthenticationError("Session expired; please log in again")

        return self._sessions.replace_user(token, fresh) or session
