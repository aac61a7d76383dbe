"""FastAPI dependencies: settings, row store, services, session and page guards."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable

from fastapi import Depends, Header, HTTPException

from src.backend.ledger.config.settings import LedgerSettings
from src.backend.ledger.integrations.row_store_client import RowStoreClient, RowStoreError
from src.backend.ledger.use_cases.entry_forms import EntryFormService
from src.backend.ledger.use_cases.identity import (
    AuthenticationError,
    IdentityService,
    Session,
    SessionStore,
)
from src.backend.ledger.use_cases.master_data import MasterDataService
from src.backend.ledger.use_cases.request_lifecycle import RequestLifecycleService
from src.backend.ledger.use_cases.user_admin import UserAdminService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> LedgerSettings:
    return LedgerSettings.from_env()


def get_row_store(settings: LedgerSettings = Depends(get_settings)) -> RowStoreClient:
    return RowStoreClient.from_settings(settings)


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    return SessionStore(max_idle_seconds=get_settings().session_max_idle_seconds)


def get_identity_service(
    row_store: RowStoreClient = Depends(get_row_store),
    sessions: SessionStore = Depends(get_session_store),
    settings: LedgerSettings = Depends(get_settings),
) -> IdentityService:
    return IdentityService(
        row_store=row_store,
        sessions=sessions,
        revalidate_seconds=settings.session_revalidate_seconds,
    )


def get_request_service(
    row_store: RowStoreClient = Depends(get_row_store),
    settings: LedgerSettings = Depends(get_settings),
) -> RequestLifecycleService:
    return RequestLifecycleService(
        row_store=row_store, attachment_folder_id=settings.request_folder_id
    )


def get_master_service(row_store: RowStoreClient = Depends(get_row_store)) -> MasterDataService:
    return MasterDataService(row_store=row_store)


def get_entry_service(
    row_store: RowStoreClient = Depends(get_row_store),
    settings: LedgerSettings = Depends(get_settings),
) -> EntryFormService:
    return EntryFormService(
        row_store=row_store,
        transaction_folder_id=settings.transaction_folder_id,
        receiving_folder_id=settings.receiving_folder_id,
    )


def get_user_admin_service(row_store: RowStoreClient = Depends(get_row_store)) -> UserAdminService:
    return UserAdminService(row_store=row_store)


def get_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_session(
    token: str | None = Depends(get_bearer_token),
    identity: IdentityService = Depends(get_identity_service),
) -> Session:
    try:
        return identity.resolve(token)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except RowStoreError as e:
        logger.error(f"Session re-validation could not reach the row store: {e}")
        raise HTTPException(status_code=502, detail=str(e))


def require_page(*pages: str) -> Callable[..., Session]:
    """Dependency factory: the session user must have at least one of `pages`."""

    def _guard(session: Session = Depends(current_session)) -> Session:
        if not any(session.user.can_access(p) for p in pages):
            raise HTTPException(
                status_code=403,
                detail=f"Access to {' / '.join(pages)} is not allowed for this user",
            )
        return session

    return _guard
