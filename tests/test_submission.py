import json
import os

import pytest

from errors import (
    FileTooLarge,
    FileUploadError,
    OrphanedLocation,
    StorageUnavailable,
    ValidationError,
)
from schemas import UploadedFileRecord
from storage_base import FileUpload, StorageAdapter, StorageLocation
from storage_local import LocalStorage
from submission import SubmissionHandler, SubmissionRequest

MB = 1024 * 1024


class RecordingStorage(StorageAdapter):
    """Keeps every call in memory; can fail uploads by filename."""

    name = "memory"

    def __init__(self):
        self.calls = []
        self.metadata = []
        self.fail = {}
        self.metadata_error = None

    def resolve_path(self, service_key, service_name, user_name):
        self.calls.append(("resolve_path", service_key, service_name, user_name))
        return StorageLocation(segments=("FormHouse", service_name, user_name), ref="loc")

    def upload(self, location, file):
        self.calls.append(("upload", file.filename))
        if file.filename in self.fail:
            raise self.fail[file.filename]
        return UploadedFileRecord(
            original_name=file.filename, storage_location_id=f"id-{file.filename}", size=file.size
        )

    def write_metadata(self, location, metadata):
        self.calls.append(("write_metadata",))
        if self.metadata_error:
            raise self.metadata_error
        self.metadata.append(metadata)
        return UploadedFileRecord(original_name="metadata.json", storage_location_id="meta", size=1)


def request(files=(), **overrides):
    fields = {"service": "pan", "name": "A B", "phone": "9999999999", "email": "a@b.com"}
    fields.update(overrides)
    return SubmissionRequest(files=list(files), **fields)


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def handler(storage):
    return SubmissionHandler(storage, max_file_size=5 * MB)


def test_submit_stores_files_and_metadata(handler, storage):
    data = handler.submit(request([FileUpload("id.pdf", b"x" * 2048)]))

    assert data.service == "PAN Card"
    assert data.files_uploaded == 1
    assert data.files[0].storage_location_id == "id-id.pdf"
    assert storage.calls == [
        ("resolve_path", "pan", "PAN Card", "A B"),
        ("upload", "id.pdf"),
        ("write_metadata",),
    ]
    [metadata] = storage.metadata
    assert metadata.service == "PAN Card"
    assert metadata.files[0].size == 2048
    assert metadata.submitted_at.tzinfo is not None


def test_submit_without_files_still_writes_metadata(handler, storage):
    data = handler.submit(request())

    assert data.files_uploaded == 0
    assert storage.metadata[0].files == []


def test_unknown_service_key_is_used_as_name(handler, storage):
    data = handler.submit(request(service="passport"))

    assert data.service == "passport"
    assert storage.calls[0] == ("resolve_path", "passport", "passport", "A B")


@pytest.mark.parametrize("field", ["service", "name", "phone", "email"])
def test_missing_field_writes_nothing(handler, storage, field):
    with pytest.raises(ValidationError) as exc:
        handler.submit(request(**{field: "   "}))

    assert field in exc.value.message
    assert exc.value.status_code == 400
    assert storage.calls == []


def test_oversized_file_writes_nothing(handler, storage):
    files = [FileUpload("small.pdf", b"x"), FileUpload("big.pdf", b"x" * (5 * MB + 1))]

    with pytest.raises(FileTooLarge) as exc:
        handler.submit(request(files))

    assert exc.value.message == 'File "big.pdf" is too large. Maximum size is 5MB.'
    assert storage.calls == []


def test_file_at_exact_limit_is_accepted(handler):
    data = handler.submit(request([FileUpload("edge.pdf", b"x" * 5 * MB)]))

    assert data.files_uploaded == 1


def test_not_configured_is_checked_first():
    handler = SubmissionHandler(None, max_file_size=5 * MB, provider="drive")

    with pytest.raises(StorageUnavailable) as exc:
        handler.submit(request(name=""))

    assert exc.value.title == "Google Drive API not configured"
    assert exc.value.status_code == 503
    assert handler.storage_name == "not configured"


def test_failed_file_is_skipped(handler, storage):
    storage.fail["bad.pdf"] = FileUploadError("backend error")

    data = handler.submit(request([FileUpload("bad.pdf", b"x"), FileUpload("good.pdf", b"y")]))

    assert data.files_uploaded == 1
    assert [f.original_name for f in storage.metadata[0].files] == ["good.pdf"]


def test_structural_error_aborts(handler, storage):
    storage.fail["id.pdf"] = OrphanedLocation("folder left the shared tree")

    with pytest.raises(OrphanedLocation):
        handler.submit(request([FileUpload("id.pdf", b"x"), FileUpload("other.pdf", b"y")]))

    assert ("upload", "other.pdf") not in storage.calls
    assert storage.metadata == []


def test_metadata_failure_fails_submission(handler, storage):
    storage.metadata_error = OSError("disk full")

    with pytest.raises(StorageUnavailable) as exc:
        handler.submit(request())

    assert "disk full" in exc.value.message


def test_recorder_receives_metadata(storage):
    recorded = []
    handler = SubmissionHandler(
        storage, max_file_size=MB, recorder=lambda m, loc, name: recorded.append((m, loc, name))
    )

    handler.submit(request())

    [(metadata, location, name)] = recorded
    assert metadata is storage.metadata[0]
    assert location.path == "FormHouse/PAN Card/A B"
    assert name == "memory"


def test_recorder_failure_is_not_fatal(storage):
    def broken(*args):
        raise RuntimeError("database is locked")

    handler = SubmissionHandler(storage, max_file_size=MB, recorder=broken)

    assert handler.submit(request()).files_uploaded == 0


def test_local_end_to_end(tmp_path):
    handler = SubmissionHandler(LocalStorage(str(tmp_path)), max_file_size=10 * MB)

    handler.submit(request([FileUpload("id.pdf", b"x" * 2048)]))

    user_dir = tmp_path / "pan" / "A_B"
    names = sorted(os.listdir(user_dir))
    assert len(names) == 2
    [stored] = [n for n in names if not n.startswith("metadata_")]
    [meta] = [n for n in names if n.startswith("metadata_")]
    metadata = json.loads((user_dir / meta).read_text(encoding="utf-8"))
    assert metadata["service"] == "PAN Card"
    assert metadata["files"][0]["originalName"] == "id.pdf"
    assert metadata["files"][0]["storageLocationId"].endswith(stored)
    assert metadata["files"][0]["size"] == 2048
