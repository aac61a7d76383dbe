"""Runtime settings for the ledger backend.

All values come from the environment (optionally a `.env` file). Blank
placeholders in `.env.example` never override real values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import dotenv_values, load_dotenv

load_dotenv(override=False)

# Convenience: allow local runs with only `.env.example` filled.
if not os.environ.get("LEDGER_ROW_STORE_URL"):
    example_path = os.path.abspath(".env.example")
    if os.path.exists(example_path):
        for k, v in (dotenv_values(example_path) or {}).items():
            if not k or v is None or v == "":
                continue
            if not os.environ.get(k):
                os.environ[k] = v


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip() in {"1", "true", "TRUE", "yes", "YES"}


@dataclass(frozen=True, slots=True)
class LedgerSettings:
    row_store_url: str
    http_timeout_seconds: int = 30
    transaction_folder_id: str = ""
    request_folder_id: str = ""
    receiving_folder_id: str = ""
    session_revalidate_seconds: int = 300
    session_max_idle_seconds: int = 43200
    log_level: str = "INFO"
    row_store_debug: bool = False

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        load_dotenv(override=False)
        row_store_url = os.environ.get("LEDGER_ROW_STORE_URL")
        if not row_store_url:
            raise ValueError("Missing LEDGER_ROW_STORE_URL")

        return cls(
            row_store_url=row_store_url,
            http_timeout_seconds=int(os.environ.get("LEDGER_HTTP_TIMEOUT_SECONDS", "30")),
            transaction_folder_id=os.environ.get("LEDGER_TRANSACTION_FOLDER_ID", ""),
            request_folder_id=os.environ.get("LEDGER_REQUEST_FOLDER_ID", ""),
            receiving_folder_id=os.environ.get("LEDGER_RECEIVING_FOLDER_ID", ""),
            session_revalidate_seconds=int(
                os.environ.get("LEDGER_SESSION_REVALIDATE_SECONDS", "300")
            ),
            session_max_idle_seconds=int(
                os.environ.get("LEDGER_SESSION_MAX_IDLE_SECONDS", "43200")
            ),
            log_level=os.environ.get("LEDGER_LOG_LEVEL", "INFO"),
            row_store_debug=_env_flag("LEDGER_ROW_STORE_DEBUG"),
        )


def configure_logging(settings: LedgerSettings) -> None:
    """Apply the configured root level and quieten chatty HTTP libraries."""

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    if settings.row_store_debug:
        logging.getLogger("src.backend.ledger.integrations").setLevel(logging.DEBUG)
