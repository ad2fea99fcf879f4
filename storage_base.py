# storage_base.py
"""
The contract every storage backend implements.

A submission goes through three calls: resolve_path() once for the
root/service/user location, upload() once per file, write_metadata() once
at the end. Backends raise FileUploadError for a failure that only affects
one file; anything else from errors.py aborts the submission.
"""

import hashlib
import os
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from schemas import SubmissionMetadata, UploadedFileRecord

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")
_UNDERSCORE_RUNS = re.compile(r"_+")

MIME_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


def sanitize_segment(value: str) -> str:
    """
    Turn a service or user name into a path / folder segment.

    Every character outside [A-Za-z0-9] becomes "_", runs of "_" collapse and
    edge underscores are dropped:  "A B" -> "A_B", "O'Brien, Jr." -> "O_Brien_Jr".

    Names with letters or digits outside ASCII get a short hash of the full
    name appended, so "सीता" and "राम" do not share a folder:
    "सीता" -> "u_<hash>", "सीता Devi" -> "Devi_<hash>".
    """
    value = (value or "").strip()
    cleaned = _UNSAFE_CHARS.sub("_", value)
    cleaned = _UNDERSCORE_RUNS.sub("_", cleaned).strip("_")
    if any(ch.isalnum() and not ch.isascii() for ch in value):
        digest = hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]
        cleaned = f"{cleaned}_{digest}" if cleaned else f"u_{digest}"
    return cleaned or "unknown"


def get_mime_type(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return MIME_TYPES.get(ext, "application/octet-stream")


def client_basename(filename: str) -> str:
    # browsers may send "C:\\fakepath\\x.pdf"; keep the last component only
    name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    return name or "file"


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def metadata_filename() -> str:
    return f"metadata_{timestamp_ms()}.json"


def timestamped_name(filename: str, stamp: int, counter: int = 0) -> str:
    """<stem>_<stamp><ext> for a client filename; _<counter> goes before the extension."""
    stem, ext = os.path.splitext(client_basename(filename))
    suffix = f"_{counter}" if counter else ""
    return f"{stem}_{stamp}{suffix}{ext}"


@dataclass(frozen=True)
class FileUpload:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StorageLocation:
    """Resolved root/service/user location. `ref` is what the backend addresses it by."""

    segments: Tuple[str, ...]
    ref: str

    @property
    def path(self) -> str:
        return "/".join(self.segments)


class StorageAdapter(ABC):
    name = "storage"

    @abstractmethod
    def resolve_path(self, service_key: str, service_name: str, user_name: str) -> StorageLocation:
        ...

    @abstractmethod
    def upload(self, location: StorageLocation, file: FileUpload) -> UploadedFileRecord:
        ...

    @abstractmethod
    def write_metadata(self, location: StorageLocation, metadata: SubmissionMetadata) -> UploadedFileRecord:
        ...
