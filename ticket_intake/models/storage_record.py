from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StorageRecord(BaseModel):
    """One object to be written by the Storage collaborator."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    data: bytes
    content_type: str
    metadata: dict[str, str] = {}
