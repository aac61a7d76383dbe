"""Pytest configuration.

Ensures the `src.*` packages can be imported during test collection without
an editable install.
"""

import sys
from pathlib import Path

import pytest


def _prepend_sys_path(path: Path) -> None:
    resolved = str(path.resolve())
    if resolved not in sys.path:
        sys.path.insert(0, resolved)


REPO_ROOT = Path(__file__).resolve().parent

# Allow importing `src.*` package explicitly.
_prepend_sys_path(REPO_ROOT)


@pytest.fixture
def ledger_env_vars(monkeypatch):
    """Minimal environment for building `LedgerSettings.from_env()`."""
    values = {
        "LEDGER_ROW_STORE_URL": "https://proxy.test/exec",
        "LEDGER_HTTP_TIMEOUT_SECONDS": "12",
        "LEDGER_TRANSACTION_FOLDER_ID": "folder-txn",
        "LEDGER_REQUEST_FOLDER_ID": "folder-req",
        "LEDGER_RECEIVING_FOLDER_ID": "folder-rcv",
    }
    for k, v in values.items():
        monkeypatch.setenv(k, v)
    return values
