# storage_firebase.py

import json
import logging
from datetime import datetime, timezone
from typing import Optional

import firebase_admin
from firebase_admin import credentials, storage
from google.api_core.exceptions import GoogleAPIError, PreconditionFailed

from errors import FileUploadError, StorageUnavailable
from schemas import SubmissionMetadata, UploadedFileRecord
from storage_base import (
    FileUpload,
    StorageAdapter,
    StorageLocation,
    client_basename,
    get_mime_type,
    metadata_filename,
    sanitize_segment,
    timestamp_ms,
    timestamped_name,
)

logger = logging.getLogger(__name__)

APP_NAME = "formhouse"


class FirebaseStorage(StorageAdapter):
    """Stores objects at FormHouse/<service>/<user>/<file> in a Firebase Storage bucket."""

    name = "firebase"

    def __init__(self, bucket, root_name: str = "FormHouse"):
        self.bucket = bucket
        self.root_name = root_name

    @classmethod
    def from_service_account(cls, credentials_path: str, bucket_name: Optional[str] = None,
                             root_name: str = "FormHouse") -> "FirebaseStorage":
        with open(credentials_path, "r", encoding="utf-8") as f:
            project_id = json.load(f).get("project_id")
        bucket_name = bucket_name or f"{project_id}.appspot.com"

        try:
            app = firebase_admin.get_app(APP_NAME)
        except ValueError:
            app = firebase_admin.initialize_app(
                credentials.Certificate(credentials_path),
                {"storageBucket": bucket_name},
                name=APP_NAME,
            )
        bucket = storage.bucket(bucket_name, app=app)
        logger.info("Firebase Storage initialized, bucket: %s", bucket.name)
        return cls(bucket, root_name=root_name)

    def resolve_path(self, service_key: str, service_name: str, user_name: str) -> StorageLocation:
        segments = (self.root_name, sanitize_segment(service_name), sanitize_segment(user_name))
        return StorageLocation(segments=segments, ref="/".join(segments))

    def public_url(self, object_path: str) -> str:
        return f"https://storage.googleapis.com/{self.bucket.name}/{object_path}"

    def upload(self, location: StorageLocation, file: FileUpload) -> UploadedFileRecord:
        content_type = get_mime_type(client_basename(file.filename))
        stamp = timestamp_ms()
        counter = 0
        while True:
            object_path = f"{location.ref}/{timestamped_name(file.filename, stamp, counter)}"
            blob = self.bucket.blob(object_path)
            blob.metadata = {
                "originalName": file.filename,
                "service": location.segments[1],
                "userName": location.segments[2],
                "uploadedAt": datetime.now(timezone.utc).isoformat(),
            }
            try:
                # generation 0: create only, never replace an earlier submission's object
                blob.upload_from_string(file.content, content_type=content_type, if_generation_match=0)
                break
            except PreconditionFailed:
                counter += 1
            except GoogleAPIError as e:
                raise FileUploadError(f"Firebase upload of {file.filename!r} failed: {e}") from e

        try:
            blob.make_public()
        except GoogleAPIError as e:
            raise FileUploadError(f"Could not make {file.filename!r} public: {e}") from e

        return UploadedFileRecord(
            original_name=file.filename,
            storage_location_id=object_path,
            access_url=self.public_url(object_path),
            size=file.size,
        )

    def write_metadata(self, location: StorageLocation, metadata: SubmissionMetadata) -> UploadedFileRecord:
        filename = metadata_filename()
        object_path = f"{location.ref}/{filename}"
        payload = metadata.to_json()
        blob = self.bucket.blob(object_path)
        try:
            blob.upload_from_string(payload, content_type="application/json")
            blob.make_public()
        except GoogleAPIError as e:
            raise StorageUnavailable(f"Could not store submission metadata: {e}") from e

        return UploadedFileRecord(
            original_name=filename,
            storage_location_id=object_path,
            access_url=self.public_url(object_path),
            size=len(payload.encode("utf-8")),
        )
