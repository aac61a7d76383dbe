"""All ledger endpoints under one prefix."""

from fastapi import APIRouter

from src.backend.ledger.api.auth_router import auth_router
from src.backend.ledger.api.master_router import master_router
from src.backend.ledger.api.receiving_router import receiving_router
from src.backend.ledger.api.requests_router import requests_router
from src.backend.ledger.api.transactions_router import transactions_router
from src.backend.ledger.api.users_router import users_router

ledger_router = APIRouter(prefix="/api/ledger")

ledger_router.include_router(auth_router)
ledger_router.include_router(master_router)
ledger_router.include_router(transactions_router)
ledger_router.include_router(requests_router)
ledger_router.include_router(receiving_router)
ledger_router.include_router(users_router)
