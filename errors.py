# errors.py
"""
Error taxonomy for FormHouse.

Every error carries a short `title` (what the API returns as "error"), a
human-readable `message` with remediation hints, a machine-readable `kind`
and the HTTP status the API answers with.
"""

from typing import Any, Dict, Optional


class FormHouseError(Exception):
    kind = "formhouse_error"
    status_code = 500
    default_title = "FormHouse error"

    def __init__(self, message: str, title: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.title = title or self.default_title

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.title, "message": self.message, "kind": self.kind}


# ---------- 400: the request itself is wrong ----------

class ValidationError(FormHouseError):
    kind = "validation_error"
    status_code = 400
    default_title = "Missing required fields: service, name, phone, email"


class FileTooLarge(FormHouseError):
    kind = "file_too_large"
    status_code = 400
    default_title = "File too large"


# ---------- 503: storage provider missing, misconfigured or not shared ----------

class InvalidReference(FormHouseError):
    kind = "invalid_reference"
    status_code = 503
    default_title = "Invalid folder reference"


class NotFound(FormHouseError):
    kind = "not_found"
    status_code = 503
    default_title = "Folder not found"


class PermissionDenied(FormHouseError):
    kind = "permission_denied"
    status_code = 503
    default_title = "Permission denied"


class OrphanedLocation(FormHouseError):
    kind = "orphaned_location"
    status_code = 503
    default_title = "Folder is outside the shared FormHouse folder"


class StorageQuotaUnavailable(FormHouseError):
    kind = "storage_quota_unavailable"
    status_code = 503
    default_title = "Service account has no storage quota"


class StorageUnavailable(FormHouseError):
    kind = "storage_unavailable"
    status_code = 503
    default_title = "Storage not configured"


# ---------- 500 ----------

class FileUploadError(FormHouseError):
    """A single file could not be stored. Submissions skip the file and go on."""

    kind = "file_upload_error"
    status_code = 500
    default_title = "Failed to upload file"


class InternalError(FormHouseError):
    kind = "internal_error"
    status_code = 500
    default_title = "Internal server error"
