"""Duplicate ledger: the record of ticket numbers already accepted.

The production ledger is one column of a Google Sheet. It is maintained
outside this service (the pipeline never writes to it) and is mutated by
concurrent submissions, so it is read fresh on every check; only the
credentials and HTTP session are kept for the life of the process.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Sequence
from urllib.parse import quote

import httpx
from google.auth import exceptions as auth_exc
from google.auth.transport.requests import Request as AuthRequest
from google.oauth2 import service_account

from ticket_intake.config import Settings
from ticket_intake.errors import CredentialError, LedgerError
from ticket_intake.services.secrets import SecretProvider
from ticket_intake.utils.lazy import LazyResource

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]


class DuplicateLedger(ABC):
    @abstractmethod
    def list_column(self, ledger_id: str, column: str) -> Sequence[str]:
        """Return every cell of *column* in ledger *ledger_id*, in order."""


class GoogleSheetsLedger(DuplicateLedger):
    """Reads a column through the Sheets v4 ``values.get`` endpoint."""

    _BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"

    def __init__(
        self,
        secrets: SecretProvider,
        *,
        secret_name: str,
        timeout: float = 10.0,
        retries: int = 0,
    ) -> None:
        self._secrets = secrets
        self._secret_name = secret_name
        self._timeout = timeout
        self._retries = retries
        self._credentials = LazyResource(self._load_credentials, name="ledger credentials")
        self._client = LazyResource(self._build_client, name="ledger HTTP client")
        self._token_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_column(self, ledger_id: str, column: str) -> Sequence[str]:
        if not ledger_id:
            raise LedgerError("ledger id is not configured")
        url = f"{self._BASE_URL}/{quote(ledger_id, safe='')}/values/{quote(column, safe='')}"
        headers = {"Authorization": f"Bearer {self._access_token()}"}
        logger.debug("GET %s", url)
        try:
            resp = self._client.get().get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise LedgerError(f"ledger request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise LedgerError(f"ledger returned {resp.status_code}: {resp.text}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise LedgerError("ledger returned a non-JSON body") from exc
        return flatten_values(payload.get("values") or [])

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load_credentials(self) -> service_account.Credentials:
        info = self._secrets.get_secret(self._secret_name)
        try:
            return service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
        except (ValueError, KeyError) as exc:
            raise CredentialError(f"invalid service account in {self._secret_name!r}: {exc}") from exc

    def _build_client(self) -> httpx.Client:
        transport = httpx.HTTPTransport(retries=self._retries)
        return httpx.Client(timeout=self._timeout, transport=transport)

    def _access_token(self) -> str:
        creds = self._credentials.get()
        with self._token_lock:
            if not creds.valid:
                try:
                    creds.refresh(AuthRequest())
                except auth_exc.GoogleAuthError as exc:
                    raise CredentialError(f"could not authorise ledger access: {exc}") from exc
            return creds.token


class StaticLedger(DuplicateLedger):
    """In-memory list of ticket numbers."""

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self.entries = list(entries)

    def list_column(self, ledger_id: str, column: str) -> Sequence[str]:  # noqa: ARG002
        return list(self.entries)


class FileLedger(DuplicateLedger):
    """Newline separated ticket numbers in a local file, re-read on every check."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def list_column(self, ledger_id: str, column: str) -> Sequence[str]:  # noqa: ARG002
        if not self._path.exists():
            logger.warning("Ledger file %s does not exist; treating it as empty", self._path)
            return []
        try:
            return self._path.read_text().splitlines()
        except OSError as exc:
            raise LedgerError(f"cannot read ledger file {self._path}: {exc}") from exc


def flatten_values(rows: Iterable[Any]) -> list[str]:
    """Flatten a Sheets ``values`` matrix into a list of cell strings."""

    cells: list[str] = []
    for row in rows:
        if isinstance(row, (list, tuple)):
            cells.extend(str(cell) for cell in row)
        else:
            cells.append(str(row))
    return cells


def is_duplicate(ledger: DuplicateLedger, ledger_id: str, column: str, identifier: str) -> bool:
    """True when *identifier* matches a ledger entry, ignoring surrounding whitespace."""

    return any(entry.strip() == identifier for entry in ledger.list_column(ledger_id, column))


def build_ledger(settings: Settings, secrets: SecretProvider) -> DuplicateLedger:
    if settings.ledger_backend == "static":
        if settings.ledger_static_path:
            return FileLedger(settings.ledger_static_path)
        return StaticLedger()
    return GoogleSheetsLedger(
        secrets,
        secret_name=settings.google_secret_name,
        timeout=settings.ledger_timeout,
        retries=settings.ledger_retries,
    )
