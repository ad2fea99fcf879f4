# storage_drive.py

import logging
from typing import Any, Dict, Optional

from drive_client import DriveClient
from drive_folders import FolderResolver
from schemas import SubmissionMetadata, UploadedFileRecord
from storage_base import (
    FileUpload,
    StorageAdapter,
    StorageLocation,
    client_basename,
    get_mime_type,
    metadata_filename,
    sanitize_segment,
)

logger = logging.getLogger(__name__)


class DriveStorage(StorageAdapter):
    """Stores files in <FormHouse folder>/<service>/<user>/ on Google Drive."""

    name = "drive"

    def __init__(self, drive: DriveClient, root_ref: Optional[str] = None, root_name: str = "FormHouse"):
        self.drive = drive
        self.resolver = FolderResolver(drive, root_ref=root_ref, root_name=root_name)

    @classmethod
    def from_credentials(cls, credentials_path: str, root_ref: Optional[str] = None,
                         root_name: str = "FormHouse") -> "DriveStorage":
        drive = DriveClient.from_service_account_file(credentials_path)
        logger.info("Google Drive API initialized, service account: %s", drive.service_account_email)
        logger.info("Make sure your %s folder is shared with this email address", root_name)
        return cls(drive, root_ref=root_ref, root_name=root_name)

    @property
    def service_account_email(self) -> Optional[str]:
        return self.drive.service_account_email

    def resolve_path(self, service_key: str, service_name: str, user_name: str) -> StorageLocation:
        root = self.resolver.resolve_root()
        service_segment = sanitize_segment(service_name)
        user_segment = sanitize_segment(user_name)

        service_folder = self.resolver.find_or_create_folder(root.id, service_segment)
        user_folder = self.resolver.find_or_create_folder(service_folder, user_segment)
        return StorageLocation(
            segments=(self.resolver.root_name, service_segment, user_segment),
            ref=user_folder,
        )

    def _upload(self, location: StorageLocation, name: str, content: bytes, mime_type: str) -> Dict[str, Any]:
        # folder resolution and upload are separate calls; check the destination again
        self.resolver.verify_ancestry(location.ref)
        logger.info('Uploading "%s" to folder %s', name, location.ref)
        return self.drive.upload_file(name, content, mime_type, location.ref)

    def upload(self, location: StorageLocation, file: FileUpload) -> UploadedFileRecord:
        name = client_basename(file.filename)
        result = self._upload(location, name, file.content, get_mime_type(name))
        return UploadedFileRecord(
            original_name=file.filename,
            storage_location_id=result["id"],
            access_url=result.get("webViewLink"),
            size=int(result.get("size") or file.size),
        )

    def write_metadata(self, location: StorageLocation, metadata: SubmissionMetadata) -> UploadedFileRecord:
        filename = metadata_filename()
        payload = metadata.to_json().encode("utf-8")
        result = self._upload(location, filename, payload, "application/json")
        return UploadedFileRecord(
            original_name=filename,
            storage_location_id=result["id"],
            access_url=result.get("webViewLink"),
            size=len(payload),
        )

    def check_root(self) -> Dict[str, Any]:
        """Diagnostic for /api/test-folder. Raises the same errors a submission would."""
        root = self.resolver.resolve_root()
        return {
            "success": True,
            "message": "Folder access verified successfully",
            "folder": {"id": root.id, "name": root.name},
            "serviceAccountEmail": self.service_account_email,
            "instructions": "Everything is configured correctly! You can now upload files.",
        }
