from __future__ import annotations

import json

import pytest
import requests

from src.backend.ledger.integrations.row_store_client import RowStoreClient, RowStoreError


class _FakeResp:
    def __init__(self, status_code: int, payload, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text or json.dumps(payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _client() -> RowStoreClient:
    return RowStoreClient(base_url="https://proxy.test/exec", timeout_seconds=7)


def test_fetch_rows_sends_sheet_and_action_with_timeout(monkeypatch) -> None:
    seen = {}

    def fake_request(method, url, params=None, data=None, timeout=None):
        seen.update(method=method, url=url, params=params, data=data, timeout=timeout)
        return _FakeResp(200, {"success": True, "data": [["h1", "h2"], ["a", 1], "junk"]})

    monkeypatch.setattr("requests.request", fake_request)

    rows = _client().fetch_rows("Login")

    assert seen["method"] == "GET"
    assert seen["url"] == "https://proxy.test/exec"
    assert seen["params"] == {"sheet": "Login", "action": "fetch"}
    assert seen["data"] is None
    assert seen["timeout"] == 7
    assert rows == [["h1", "h2"], ["a", 1], []]


def test_fetch_rows_rejects_proxy_failure(monkeypatch) -> None:
    def fake_request(method, url, params=None, data=None, timeout=None):
        return _FakeResp(200, {"success": False, "error": "Sheet not found"})

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(RowStoreError, match="fetch Login: Sheet not found"):
        _client().fetch_rows("Login")


def test_fetch_rows_requires_row_list(monkeypatch) -> None:
    def fake_request(method, url, params=None, data=None, timeout=None):
        return _FakeResp(200, {"success": True, "data": {"rows": []}})

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(RowStoreError, match="not a list"):
        _client().fetch_rows("Data")


@pytest.mark.parametrize(
    "resp",
    [
        _FakeResp(500, {}, text="internal error"),
        _FakeResp(200, ValueError("no json"), text="<html>"),
        _FakeResp(200, ["not", "a", "dict"]),
    ],
)
def test_bad_responses_raise_row_store_error(monkeypatch, resp) -> None:
    monkeypatch.setattr("requests.request", lambda *a, **k: resp)

    with pytest.raises(RowStoreError):
        _client().fetch_rows("Master")


def test_network_errors_are_wrapped(monkeypatch) -> None:
    def fake_request(method, url, params=None, data=None, timeout=None):
        raise requests.ConnectionError("dns failure")

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(RowStoreError, match="fetch Request: request failed"):
        _client().fetch_rows("Request")


def test_update_row_posts_form_with_json_row(monkeypatch) -> None:
    seen = {}

    def fake_request(method, url, params=None, data=None, timeout=None):
        seen.update(method=method, data=data)
        return _FakeResp(200, {"success": True})

    monkeypatch.setattr("requests.request", fake_request)

    _client().update_row("Request", 9, ["", "REQ-004", None, 12.5])

    assert seen["method"] == "POST"
    assert seen["data"]["action"] == "update"
    assert seen["data"]["sheetName"] == "Request"
    assert seen["data"]["rowIndex"] == "9"
    assert json.loads(seen["data"]["rowData"]) == ["", "REQ-004", "", 12.5]


def test_update_row_rejects_non_positive_index(monkeypatch) -> None:
    def fake_request(*a, **k):
        raise AssertionError("no request expected")

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(ValueError):
        _client().update_row("Login", 0, ["x"])


def test_insert_row_error_names_the_sheet(monkeypatch) -> None:
    def fake_request(method, url, params=None, data=None, timeout=None):
        assert data["action"] == "insert"
        return _FakeResp(200, {"success": False})

    monkeypatch.setattr("requests.request", fake_request)

    with pytest.raises(RowStoreError, match="insert Data: operation failed"):
        _client().insert_row("Data", ["a"])


def test_upload_file_returns_link(monkeypatch) -> None:
    seen = {}

    def fake_request(method, url, params=None, data=None, timeout=None):
        seen.update(data=data)
        return _FakeResp(200, {"success": True, "fileUrl": "https://drive.test/abc"})

    monkeypatch.setattr("requests.request", fake_request)

    uploaded = _client().upload_file(
        file_name="bill.pdf", base64_data="aGVsbG8=", mime_type="application/pdf", folder_id="F1"
    )

    assert uploaded.file_url == "https://drive.test/abc"
    assert seen["data"] == {
        "action": "uploadFile",
        "fileName": "bill.pdf",
        "base64Data": "aGVsbG8=",
        "mimeType": "application/pdf",
        "folderId": "F1",
    }


def test_upload_file_requires_link_and_folder(monkeypatch) -> None:
    monkeypatch.setattr("requests.request", lambda *a, **k: _FakeResp(200, {"success": True}))
    client = _client()

    with pytest.raises(RowStoreError, match="no fileUrl"):
        client.upload_file(file_name="a.png", base64_data="aGk=", mime_type="image/png", folder_id="F")
    with pytest.raises(ValueError):
        client.upload_file(file_name="a.png", base64_data="aGk=", mime_type="image/png", folder_id="")
