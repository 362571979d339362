"""Tests for the storage backends."""
import json
from unittest.mock import Mock, patch

import pytest
from google.api_core import exceptions as gexc

from ticket_intake.errors import ObjectNotFound, StorageError
from ticket_intake.models import ObjectRef, StorageRecord
from ticket_intake.services.storage import GCSStorage, LocalDirectoryStorage

REF = ObjectRef(bucket="tickets", key="uploads/a.png")


@pytest.fixture
def mock_gcs_client():
    """Create a mock Cloud Storage client."""
    with patch("google.cloud.storage.Client") as mock_client:
        yield mock_client.return_value


def test_gcs_get_returns_bytes_and_content_type(mock_gcs_client):
    blob = Mock(content_type="image/png")
    blob.download_as_bytes.return_value = b"png-bytes"
    mock_gcs_client.bucket.return_value.get_blob.return_value = blob

    data, content_type = GCSStorage().get(REF)

    assert (data, content_type) == (b"png-bytes", "image/png")
    mock_gcs_client.bucket.assert_called_with("tickets")
    mock_gcs_client.bucket.return_value.get_blob.assert_called_once_with("uploads/a.png", retry=None)


def test_gcs_get_missing_object(mock_gcs_client):
    mock_gcs_client.bucket.return_value.get_blob.return_value = None
    with pytest.raises(ObjectNotFound):
        GCSStorage().get(REF)


def test_gcs_get_api_error(mock_gcs_client):
    mock_gcs_client.bucket.return_value.get_blob.side_effect = gexc.ServiceUnavailable("down")
    with pytest.raises(StorageError):
        GCSStorage().get(REF)


def test_gcs_put_sets_metadata_and_content_type(mock_gcs_client):
    blob = mock_gcs_client.bucket.return_value.blob.return_value
    record = StorageRecord(
        bucket="tickets",
        key="rejected/a.png",
        data=b"raw",
        content_type="image/png",
        metadata={"reason": "image too blurry", "originalKey": "uploads/a.png"},
    )

    GCSStorage().put(record)

    mock_gcs_client.bucket.return_value.blob.assert_called_once_with("rejected/a.png")
    assert blob.metadata == {"reason": "image too blurry", "originalKey": "uploads/a.png"}
    blob.upload_from_string.assert_called_once_with(b"raw", content_type="image/png", retry=None)


def test_gcs_retry_policy_is_passed_through(mock_gcs_client):
    GCSStorage(retry_deadline=30).put(StorageRecord(bucket="b", key="k", data=b"", content_type="image/png"))
    blob = mock_gcs_client.bucket.return_value.blob.return_value
    assert blob.upload_from_string.call_args.kwargs["retry"] is not None


def test_gcs_client_created_once():
    with patch("google.cloud.storage.Client") as factory:
        storage = GCSStorage()
        storage.put(StorageRecord(bucket="b", key="k1", data=b"", content_type="image/png"))
        storage.put(StorageRecord(bucket="b", key="k2", data=b"", content_type="image/png"))
    factory.assert_called_once_with()


def test_local_storage_round_trip(tmp_path):
    storage = LocalDirectoryStorage(tmp_path)
    storage.put(
        StorageRecord(
            bucket="tickets",
            key="validated/a.png.png",
            data=b"png",
            content_type="image/png",
            metadata={"identifier": "42"},
        )
    )

    data, content_type = storage.get(ObjectRef(bucket="tickets", key="validated/a.png.png"))

    assert (data, content_type) == (b"png", "image/png")
    sidecar = json.loads((tmp_path / "tickets" / "validated" / "a.png.png.meta.json").read_text())
    assert sidecar["metadata"] == {"identifier": "42"}


def test_local_storage_guesses_content_type(tmp_path):
    (tmp_path / "tickets" / "uploads").mkdir(parents=True)
    (tmp_path / "tickets" / "uploads" / "a.png").write_bytes(b"x")
    assert LocalDirectoryStorage(tmp_path).get(REF) == (b"x", "image/png")


def test_local_storage_missing_object(tmp_path):
    with pytest.raises(ObjectNotFound):
        LocalDirectoryStorage(tmp_path).get(REF)
