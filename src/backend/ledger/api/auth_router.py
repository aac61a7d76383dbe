"""Login / logout / current-user endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from src.backend.ledger.api.dependencies import (
    current_session,
    get_identity_service,
)
from src.backend.ledger.use_cases.identity import (
    AuthenticationError,
    IdentityService,
    Session,
)

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


@auth_router.post("/login")
def login(body: LoginRequest, identity: IdentityService = Depends(get_identity_service)):
    """Check credentials against the Login sheet and open a session.

    The returned token goes in `Authorization: Bearer <token>` on every
    other call.
    """

    try:
        session = identity.login(body.username, body.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"token": session.token, "user": session.user.public_dict()}


@auth_router.post("/logout")
def logout(
    session: Session = Depends(current_session),
    identity: IdentityService = Depends(get_identity_service),
):
    identity.logout(session.token)
    logger.info(f"Logged out {session.user.id}")
    return {"status": "logged out"}


@auth_router.get("/me")
def me(session: Session = Depends(current_session)):
    return session.user.public_dict()
