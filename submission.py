# submission.py

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from errors import (
    FileTooLarge,
    FileUploadError,
    FormHouseError,
    StorageUnavailable,
    ValidationError,
)
from form_config import service_display_name
from schemas import SubmissionMetadata, SubmitData, UploadedFileRecord
from storage import PROVIDER_TITLES
from storage_base import FileUpload, StorageAdapter, StorageLocation

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("service", "name", "phone", "email")

# called as recorder(metadata, location, storage_name) once the metadata is stored
Recorder = Callable[[SubmissionMetadata, StorageLocation, str], object]


@dataclass
class SubmissionRequest:
    service: Optional[str]
    name: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    files: List[FileUpload] = field(default_factory=list)


class SubmissionHandler:
    def __init__(
        self,
        storage: Optional[StorageAdapter],
        max_file_size: int,
        provider: str = "local",
        recorder: Optional[Recorder] = None,
    ):
        self.storage = storage
        self.max_file_size = max_file_size
        self.provider = provider
        self.recorder = recorder

    @property
    def storage_name(self) -> str:
        return self.storage.name if self.storage else "not configured"

    # ---------- checks that run before anything is written ----------

    def ensure_configured(self) -> StorageAdapter:
        if self.storage is None:
            title = PROVIDER_TITLES.get(self.provider, self.provider)
            raise StorageUnavailable(
                f"Please configure {title} to enable file uploads. See the README for instructions.",
                title=f"{title} not configured",
            )
        return self.storage

    def validate(self, request: SubmissionRequest) -> None:
        missing = [f for f in REQUIRED_FIELDS if not (getattr(request, f) or "").strip()]
        if missing:
            raise ValidationError(f"Please fill in all required fields ({', '.join(missing)} missing).")

        for file in request.files:
            if file.size > self.max_file_size:
                limit_mb = self.max_file_size / (1024 * 1024)
                raise FileTooLarge(
                    f'File "{file.filename}" is too large. Maximum size is {limit_mb:g}MB.'
                )

    # ---------- submit ----------

    def submit(self, request: SubmissionRequest) -> SubmitData:
        storage = self.ensure_configured()
        self.validate(request)

        service_name = service_display_name(request.service)
        location = storage.resolve_path(request.service, service_name, request.name)
        logger.info("Storing %d file(s) for %s under %s", len(request.files), service_name, location.path)

        uploaded: List[UploadedFileRecord] = []
        for file in request.files:
            try:
                uploaded.append(storage.upload(location, file))
            except FileUploadError as e:
                logger.error("Error uploading file %s: %s", file.filename, e.message)

        metadata = SubmissionMetadata(
            service=service_name,
            name=request.name,
            phone=request.phone,
            email=request.email,
            submitted_at=datetime.now(timezone.utc),
            files=uploaded,
        )
        try:
            storage.write_metadata(location, metadata)
        except FormHouseError:
            raise
        except Exception as e:
            logger.exception("Error writing submission metadata")
            raise StorageUnavailable(f"Could not store submission metadata: {e}") from e

        if self.recorder is not None:
            try:
                self.recorder(metadata, location, storage.name)
            except Exception:
                # the metadata file is the record of truth; the index can be rebuilt
                logger.exception("Could not record submission in the index")

        return SubmitData(service=service_name, files_uploaded=len(uploaded), files=uploaded)
