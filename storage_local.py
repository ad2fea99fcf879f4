# storage_local.py

import logging
import os
from typing import Dict, List

from errors import FileUploadError
from schemas import SubmissionMetadata, UploadedFileRecord
from storage_base import (
    FileUpload,
    StorageAdapter,
    StorageLocation,
    metadata_filename,
    sanitize_segment,
    timestamp_ms,
    timestamped_name,
)

logger = logging.getLogger(__name__)


class LocalStorage(StorageAdapter):
    """Stores files under <upload_dir>/<service key>/<user>/ on local disk."""

    name = "local"

    def __init__(self, upload_dir: str = "uploads"):
        self.upload_dir = upload_dir
        os.makedirs(self.upload_dir, exist_ok=True)

    def resolve_path(self, service_key: str, service_name: str, user_name: str) -> StorageLocation:
        segments = (sanitize_segment(service_key), sanitize_segment(user_name))
        directory = os.path.join(self.upload_dir, *segments)
        os.makedirs(directory, exist_ok=True)
        return StorageLocation(segments=segments, ref=directory)

    def _unique_name(self, directory: str, original: str) -> str:
        stamp = timestamp_ms()
        saved = timestamped_name(original, stamp)
        counter = 1
        while os.path.exists(os.path.join(directory, saved)):
            saved = timestamped_name(original, stamp, counter)
            counter += 1
        return saved

    def upload(self, location: StorageLocation, file: FileUpload) -> UploadedFileRecord:
        saved_name = self._unique_name(location.ref, file.filename)
        target = os.path.join(location.ref, saved_name)
        try:
            with open(target, "wb") as f:
                f.write(file.content)
        except OSError as e:
            raise FileUploadError(f"Could not write {file.filename!r}: {e}") from e

        logger.info("Saved %s as %s", file.filename, target)
        return UploadedFileRecord(
            original_name=file.filename,
            storage_location_id=f"{location.path}/{saved_name}",
            access_url=None,
            size=file.size,
        )

    def write_metadata(self, location: StorageLocation, metadata: SubmissionMetadata) -> UploadedFileRecord:
        filename = metadata_filename()
        target = os.path.join(location.ref, filename)
        payload = metadata.to_json()
        with open(target, "w", encoding="utf-8") as f:
            f.write(payload)
        return UploadedFileRecord(
            original_name=filename,
            storage_location_id=f"{location.path}/{filename}",
            size=len(payload.encode("utf-8")),
        )

    def list_files(self) -> Dict[str, List[dict]]:
        """Stored files grouped by service then user, metadata files excluded."""
        services: Dict[str, List[dict]] = {}
        if not os.path.isdir(self.upload_dir):
            return services

        for service in sorted(os.listdir(self.upload_dir)):
            service_path = os.path.join(self.upload_dir, service)
            if not os.path.isdir(service_path):
                continue
            users = []
            for user in sorted(os.listdir(service_path)):
                user_path = os.path.join(service_path, user)
                if not os.path.isdir(user_path):
                    continue
                files = [
                    {
                        "name": name,
                        "path": f"{service}/{user}/{name}",
                        "size": os.path.getsize(os.path.join(user_path, name)),
                    }
                    for name in sorted(os.listdir(user_path))
                    if not name.startswith("metadata_")
                ]
                users.append({"user": user, "files": files})
            services[service] = users
        return services
