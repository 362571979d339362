"""Object storage used by the intake pipeline.

Only two operations are needed: fetching the upload that triggered the
invocation and writing exactly one result object. Results are stored
under the following key patterns in the trigger's bucket:

    rejected/{file_name}            original bytes, metadata {reason, originalKey}
    validated/{file_name}.png       normalized PNG, metadata {identifier, originalKey}
"""
from __future__ import annotations

import json
import logging
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple

from google.api_core import exceptions as gexc
from google.api_core.retry import Retry
from google.cloud import storage
from google.cloud.storage.retry import DEFAULT_RETRY

from ticket_intake.config import Settings
from ticket_intake.errors import ObjectNotFound, StorageError
from ticket_intake.models import ObjectRef, StorageRecord
from ticket_intake.utils.lazy import LazyResource

logger = logging.getLogger(__name__)

_DEFAULT_CONTENT_TYPE = "application/octet-stream"


class Storage(ABC):
    """Narrow storage capability: read one object, write one object."""

    @abstractmethod
    def get(self, ref: ObjectRef) -> Tuple[bytes, str]:
        """Return ``(bytes, content_type)``; raise ``ObjectNotFound`` if absent."""

    @abstractmethod
    def put(self, record: StorageRecord) -> None:
        """Write *record*, replacing any existing object under the same key."""


class GCSStorage(Storage):
    """Google Cloud Storage implementation.

    The ``storage.Client`` is created on first use and shared by every
    invocation in the process.
    """

    def __init__(self, *, retry_deadline: float = 0.0) -> None:
        self._client = LazyResource(storage.Client, name="GCS client")
        self._retry: Optional[Retry] = DEFAULT_RETRY.with_timeout(retry_deadline) if retry_deadline > 0 else None

    def get(self, ref: ObjectRef) -> Tuple[bytes, str]:
        bucket = self._client.get().bucket(ref.bucket)
        try:
            blob = bucket.get_blob(ref.key, retry=self._retry)
            if blob is None:
                raise ObjectNotFound(ref.bucket, ref.key)
            data = blob.download_as_bytes(retry=self._retry)
        except gexc.NotFound as exc:
            raise ObjectNotFound(ref.bucket, ref.key) from exc
        except gexc.GoogleAPIError as exc:
            raise StorageError(f"failed to read gs://{ref.bucket}/{ref.key}: {exc}") from exc
        logger.debug("Fetched gs://%s/%s (%d bytes)", ref.bucket, ref.key, len(data))
        return data, blob.content_type or _DEFAULT_CONTENT_TYPE

    def put(self, record: StorageRecord) -> None:
        blob = self._client.get().bucket(record.bucket).blob(record.key)
        blob.metadata = dict(record.metadata)
        try:
            blob.upload_from_string(record.data, content_type=record.content_type, retry=self._retry)
        except gexc.GoogleAPIError as exc:
            raise StorageError(f"failed to write gs://{record.bucket}/{record.key}: {exc}") from exc
        logger.debug("Uploaded gs://%s/%s", record.bucket, record.key)


class LocalDirectoryStorage(Storage):
    """Filesystem stand-in for a bucket, used for local runs.

    Objects live at ``{root}/{bucket}/{key}``; metadata and content type are
    kept in a ``{key}.meta.json`` sidecar.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def _path(self, bucket: str, key: str) -> Path:
        return self._root / bucket / key

    def get(self, ref: ObjectRef) -> Tuple[bytes, str]:
        path = self._path(ref.bucket, ref.key)
        if not path.is_file():
            raise ObjectNotFound(ref.bucket, ref.key)
        sidecar = path.with_name(path.name + ".meta.json")
        if sidecar.is_file():
            content_type = json.loads(sidecar.read_text())["content_type"]
        else:
            content_type = mimetypes.guess_type(path.name)[0] or _DEFAULT_CONTENT_TYPE
        return path.read_bytes(), content_type

    def put(self, record: StorageRecord) -> None:
        path = self._path(record.bucket, record.key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(record.data)
            path.with_name(path.name + ".meta.json").write_text(
                json.dumps({"content_type": record.content_type, "metadata": record.metadata}, indent=2)
            )
        except OSError as exc:
            raise StorageError(f"failed to write {path}: {exc}") from exc
        logger.info("Saved output to: %s", path)


def build_storage(settings: Settings) -> Storage:
    if settings.storage_backend == "local":
        return LocalDirectoryStorage(settings.local_storage_root)
    return GCSStorage(retry_deadline=settings.storage_retry_deadline)
