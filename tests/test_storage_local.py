import json
import os
import re
from datetime import datetime, timezone

import pytest

import storage_local
from schemas import SubmissionMetadata
from storage_base import FileUpload, get_mime_type, sanitize_segment
from storage_local import LocalStorage


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("A B", "A_B"),
        ("O'Brien, Jr.", "O_Brien_Jr"),
        ("  Ravi Kumar  ", "Ravi_Kumar"),
        ("PAN Card", "PAN_Card"),
        ("ladkiBahin", "ladkiBahin"),
        ("", "unknown"),
        ("  ", "unknown"),
        ("--", "unknown"),
    ],
)
def test_sanitize_segment(raw, expected):
    assert sanitize_segment(raw) == expected


def test_sanitize_segment_is_stable():
    assert sanitize_segment("O'Brien, Jr.") == sanitize_segment("O'Brien, Jr.")
    assert sanitize_segment("सीता") == sanitize_segment(" सीता ")


def test_non_ascii_names_get_distinct_segments():
    sita, ram = sanitize_segment("सीता"), sanitize_segment("राम")

    assert re.fullmatch(r"u_[0-9a-f]{8}", sita)
    assert re.fullmatch(r"u_[0-9a-f]{8}", ram)
    assert sita != ram


def test_partly_ascii_names_keep_the_ascii_part():
    sita_devi, ram_devi = sanitize_segment("सीता Devi"), sanitize_segment("राम Devi")

    assert sita_devi.startswith("Devi_")
    assert ram_devi.startswith("Devi_")
    assert sita_devi != ram_devi


def test_non_ascii_users_get_separate_folders(storage):
    first = storage.resolve_path("pan", "PAN Card", "सीता")
    second = storage.resolve_path("pan", "PAN Card", "राम")

    assert first.ref != second.ref


def test_mime_types():
    assert get_mime_type("ID.PDF") == "application/pdf"
    assert get_mime_type("photo.jpeg") == "image/jpeg"
    assert get_mime_type("archive.zip") == "application/octet-stream"


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "uploads"))


def test_resolve_path_uses_service_key(storage, tmp_path):
    location = storage.resolve_path("pan", "PAN Card", "A B")

    assert location.ref == str(tmp_path / "uploads" / "pan" / "A_B")
    assert os.path.isdir(location.ref)
    assert location.path == "pan/A_B"


def test_upload_keeps_stem_and_extension(storage):
    location = storage.resolve_path("pan", "PAN Card", "A B")

    record = storage.upload(location, FileUpload("id.pdf", b"x" * 2048))

    saved = os.path.basename(record.storage_location_id)
    assert saved.startswith("id_") and saved.endswith(".pdf")
    assert record.size == 2048
    assert record.original_name == "id.pdf"
    with open(os.path.join(location.ref, saved), "rb") as f:
        assert len(f.read()) == 2048


def test_upload_strips_client_directories(storage):
    location = storage.resolve_path("pan", "PAN Card", "A B")

    record = storage.upload(location, FileUpload("../../etc/passwd", b"x"))

    assert os.listdir(location.ref) == [os.path.basename(record.storage_location_id)]


def test_same_name_twice_does_not_overwrite(storage):
    location = storage.resolve_path("pan", "PAN Card", "A B")

    first = storage.upload(location, FileUpload("id.pdf", b"1"))
    second = storage.upload(location, FileUpload("id.pdf", b"2"))

    assert first.storage_location_id != second.storage_location_id
    assert len(os.listdir(location.ref)) == 2


def test_same_millisecond_gets_counter(storage, monkeypatch):
    monkeypatch.setattr(storage_local, "timestamp_ms", lambda: 1700000000000)
    location = storage.resolve_path("pan", "PAN Card", "A B")

    first = storage.upload(location, FileUpload("id.pdf", b"1"))
    second = storage.upload(location, FileUpload("id.pdf", b"2"))

    assert first.storage_location_id == "pan/A_B/id_1700000000000.pdf"
    assert second.storage_location_id == "pan/A_B/id_1700000000000_1.pdf"


def test_metadata_and_listing(storage):
    location = storage.resolve_path("aadhar", "Aadhar Card", "Sita")
    record = storage.upload(location, FileUpload("bill.png", b"x" * 10))
    metadata = SubmissionMetadata(
        service="Aadhar Card",
        name="Sita",
        phone="9876543210",
        email="sita@example.com",
        submitted_at=datetime.now(timezone.utc),
        files=[record],
    )

    meta = storage.write_metadata(location, metadata)

    with open(os.path.join(location.ref, os.path.basename(meta.storage_location_id)), encoding="utf-8") as f:
        stored = json.load(f)
    assert stored["files"][0]["storageLocationId"] == record.storage_location_id
    assert stored["files"][0]["size"] == 10

    listing = storage.list_files()
    assert list(listing) == ["aadhar"]
    [user] = listing["aadhar"]
    assert user["user"] == "Sita"
    assert [f["name"] for f in user["files"]] == [os.path.basename(record.storage_location_id)]
    assert user["files"][0]["size"] == 10


def test_listing_empty_directory(storage):
    assert storage.list_files() == {}
