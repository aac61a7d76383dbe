"""Shared fixtures for ledger tests."""

from __future__ import annotations

from typing import Any

import pytest

from src.backend.tests.fakes import DATA_HEADER, LOGIN_HEADER, REQUEST_HEADER_ROWS, FakeRowStore


@pytest.fixture
def login_rows() -> list[list[Any]]:
    return [
        LOGIN_HEADER,
        ["Alice Rao", "alice", "pw1", "user", "Dashboard, Reports, Request"],
        ["Root", "root", "secret", " Admin ", ""],
        ["Gone", "gone", "pw", "user", "Dashboard", "deleted"],
    ]


@pytest.fixture
def row_store(login_rows) -> FakeRowStore:
    return FakeRowStore({"Login": login_rows, "Data": [DATA_HEADER], "Request": list(REQUEST_HEADER_ROWS)})
