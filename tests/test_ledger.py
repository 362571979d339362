"""Tests for the duplicate ledger backends."""
import httpx
import pytest

from ticket_intake.errors import LedgerError
from ticket_intake.services.ledger import (
    FileLedger,
    GoogleSheetsLedger,
    StaticLedger,
    flatten_values,
    is_duplicate,
)
from ticket_intake.utils.lazy import LazyResource


class _NoSecrets:
    def get_secret(self, name):
        raise AssertionError("credentials should not be loaded in this test")


def _sheets_ledger(monkeypatch, handler) -> GoogleSheetsLedger:
    ledger = GoogleSheetsLedger(_NoSecrets(), secret_name="GOOGLE_CREDENTIALS_JSON")
    monkeypatch.setattr(ledger, "_access_token", lambda: "token-123")
    ledger._client = LazyResource(lambda: httpx.Client(transport=httpx.MockTransport(handler)))
    return ledger


def test_flatten_values_skips_empty_rows():
    assert flatten_values([["Ticket"], [" 123 "], [], ["456", "x"]]) == ["Ticket", " 123 ", "456", "x"]


def test_is_duplicate_trims_entries():
    ledger = StaticLedger(["Ticket Number", "  123456 ", "987"])
    assert is_duplicate(ledger, "sheet", "D:D", "123456")
    assert not is_duplicate(ledger, "sheet", "D:D", "12345")


def test_sheets_ledger_reads_column(monkeypatch):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"range": "Sheet1!D1:D3", "values": [["Ticket"], ["111"], [" 222 "]]})

    ledger = _sheets_ledger(monkeypatch, handler)

    assert list(ledger.list_column("sheet-abc", "D:D")) == ["Ticket", "111", " 222 "]
    request = requests[0]
    assert request.url.path == "/v4/spreadsheets/sheet-abc/values/D:D"
    assert request.headers["Authorization"] == "Bearer token-123"


def test_sheets_ledger_is_not_cached(monkeypatch):
    columns = [[["111"]], [["111"], ["222"]]]

    def handler(request):
        return httpx.Response(200, json={"values": columns.pop(0)})

    ledger = _sheets_ledger(monkeypatch, handler)
    assert not is_duplicate(ledger, "sheet", "D:D", "222")
    assert is_duplicate(ledger, "sheet", "D:D", "222")


def test_sheets_ledger_empty_sheet(monkeypatch):
    ledger = _sheets_ledger(monkeypatch, lambda request: httpx.Response(200, json={"range": "D1:D1000"}))
    assert list(ledger.list_column("sheet", "D:D")) == []


def test_sheets_ledger_error_status(monkeypatch):
    ledger = _sheets_ledger(monkeypatch, lambda request: httpx.Response(403, text="forbidden"))
    with pytest.raises(LedgerError):
        ledger.list_column("sheet", "D:D")


def test_sheets_ledger_transport_error(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    ledger = _sheets_ledger(monkeypatch, handler)
    with pytest.raises(LedgerError):
        ledger.list_column("sheet", "D:D")


def test_sheets_ledger_requires_id(monkeypatch):
    ledger = _sheets_ledger(monkeypatch, lambda request: httpx.Response(200, json={}))
    with pytest.raises(LedgerError):
        ledger.list_column("", "D:D")


def test_file_ledger_rereads_file(tmp_path):
    path = tmp_path / "ledger.txt"
    ledger = FileLedger(path)
    assert list(ledger.list_column("local", "D:D")) == []
    path.write_text("111\n222\n")
    assert is_duplicate(ledger, "local", "D:D", "222")


def test_file_ledger_missing_file_warns(tmp_path, caplog):
    ledger = FileLedger(tmp_path / "typo.txt")
    with caplog.at_level("WARNING"):
        assert list(ledger.list_column("local", "D:D")) == []
    assert "typo.txt" in caplog.text
