# storage_cloudinary.py

import io
import logging
import os

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from errors import FileUploadError, StorageUnavailable
from schemas import SubmissionMetadata, UploadedFileRecord
from storage_base import (
    FileUpload,
    StorageAdapter,
    StorageLocation,
    client_basename,
    metadata_filename,
    sanitize_segment,
    timestamp_ms,
    timestamped_name,
)

logger = logging.getLogger(__name__)

RAW_EXTENSIONS = (".pdf", ".doc", ".docx")


def resource_type_for(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return "raw" if ext in RAW_EXTENSIONS else "auto"


class CloudinaryStorage(StorageAdapter):
    """Stores assets in the FormHouse/<service>/<user> folder of a Cloudinary account."""

    name = "cloudinary"

    def __init__(self, root_name: str = "FormHouse", uploader=None):
        self.root_name = root_name
        self.uploader = uploader or cloudinary.uploader

    @classmethod
    def from_credentials(cls, cloud_name: str, api_key: str, api_secret: str,
                         root_name: str = "FormHouse") -> "CloudinaryStorage":
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)
        logger.info("Cloudinary configured, cloud name: %s", cloud_name)
        return cls(root_name=root_name)

    def resolve_path(self, service_key: str, service_name: str, user_name: str) -> StorageLocation:
        segments = (self.root_name, sanitize_segment(service_name), sanitize_segment(user_name))
        return StorageLocation(segments=segments, ref="/".join(segments))

    def _public_id(self, filename: str, stamp: int, counter: int) -> str:
        # raw assets keep their extension in the public id, images and videos get it from the format
        name = timestamped_name(filename, stamp, counter)
        if resource_type_for(name) == "raw":
            return name
        return os.path.splitext(name)[0]

    def upload(self, location: StorageLocation, file: FileUpload) -> UploadedFileRecord:
        resource_type = resource_type_for(client_basename(file.filename))
        stamp = timestamp_ms()
        counter = 0
        while True:
            try:
                result = self.uploader.upload(
                    io.BytesIO(file.content),
                    folder=location.ref,
                    public_id=self._public_id(file.filename, stamp, counter),
                    resource_type=resource_type,
                    overwrite=False,
                )
            except CloudinaryError as e:
                raise FileUploadError(f"Cloudinary upload of {file.filename!r} failed: {e}") from e
            # with overwrite=False an id that is taken returns the old asset untouched
            if not result.get("existing"):
                break
            counter += 1

        return UploadedFileRecord(
            original_name=file.filename,
            storage_location_id=result["public_id"],
            access_url=result.get("secure_url"),
            size=int(result.get("bytes") or file.size),
        )

    def write_metadata(self, location: StorageLocation, metadata: SubmissionMetadata) -> UploadedFileRecord:
        filename = metadata_filename()
        payload = metadata.to_json().encode("utf-8")
        try:
            result = self.uploader.upload(
                io.BytesIO(payload),
                folder=location.ref,
                public_id=filename,
                resource_type="raw",
                overwrite=False,
            )
        except CloudinaryError as e:
            raise StorageUnavailable(f"Could not store submission metadata: {e}") from e

        return UploadedFileRecord(
            original_name=filename,
            storage_location_id=result["public_id"],
            access_url=result.get("secure_url"),
            size=int(result.get("bytes") or len(payload)),
        )
