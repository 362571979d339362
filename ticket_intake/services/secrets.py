"""Credential retrieval for third-party services.

Secrets are JSON documents (a Google service-account key for the ledger).
Each one is fetched and parsed once per process and then served from
memory.
"""
from __future__ import annotations

import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from ticket_intake.config import Settings
from ticket_intake.errors import CredentialError
from ticket_intake.utils.lazy import LazyResource

logger = logging.getLogger(__name__)


class SecretProvider(ABC):
    @abstractmethod
    def get_secret(self, name: str) -> dict[str, Any]:
        """Return the parsed secret called *name*; raise ``CredentialError``."""


class SettingsSecretProvider(SecretProvider):
    """Reads secrets from configuration or the environment.

    The configured ``google_secret_name`` resolves to
    ``settings.google_credentials_json``; any other name is looked up as an
    environment variable. A value ending in ``.json`` is treated as a path,
    anything else as the JSON document itself.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._lock = threading.Lock()
        self._cache: dict[str, LazyResource[dict[str, Any]]] = {}

    def get_secret(self, name: str) -> dict[str, Any]:
        with self._lock:
            entry = self._cache.get(name)
            if entry is None:
                entry = LazyResource(lambda: self._load(name), name=f"secret {name}")
                self._cache[name] = entry
        return entry.get()

    def _raw_value(self, name: str) -> Optional[str]:
        if name == self._settings.google_secret_name and self._settings.google_credentials_json:
            return self._settings.google_credentials_json
        return os.environ.get(name)

    def _load(self, name: str) -> dict[str, Any]:
        raw = self._raw_value(name)
        if not raw:
            raise CredentialError(f"secret {name!r} is not configured")
        try:
            text = Path(raw).read_text() if raw.strip().endswith(".json") else raw
            secret = json.loads(text)
        except (OSError, ValueError) as exc:
            raise CredentialError(f"secret {name!r} could not be read: {exc}") from exc
        if not isinstance(secret, dict):
            raise CredentialError(f"secret {name!r} is not a JSON object")
        logger.info("Loaded secret %s", name)
        return secret
