# drive_client.py
"""
Thin wrapper over the Drive v3 files/permissions API.

Only the primitives the folder walk needs are exposed, and googleapiclient's
HttpError is turned into FormHouse errors here so nothing above this module
deals with HTTP status codes.
"""

import io
import json
import logging
from typing import Any, Dict, List, Optional, Type

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from errors import (
    FileUploadError,
    FormHouseError,
    NotFound,
    PermissionDenied,
    StorageQuotaUnavailable,
    StorageUnavailable,
)

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive"]
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def _error_payload(err: HttpError) -> Dict[str, Any]:
    content = getattr(err, "content", b"") or b""
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    try:
        data = json.loads(content)
    except (TypeError, ValueError):
        return {}
    error = data.get("error") if isinstance(data, dict) else None
    return error if isinstance(error, dict) else {}


def _status(err: HttpError) -> int:
    try:
        return int(err.resp.status)
    except (AttributeError, TypeError, ValueError):
        return 0


def is_quota_error(err: HttpError) -> bool:
    payload = _error_payload(err)
    message = f"{payload.get('message', '')} {err}".lower()
    reasons = {e.get("reason") for e in payload.get("errors", []) if isinstance(e, dict)}
    return _status(err) == 507 or "storageQuotaExceeded" in reasons or "storage quota" in message


def classify_http_error(
    err: HttpError,
    what: str,
    fallback: Type[FormHouseError] = StorageUnavailable,
) -> FormHouseError:
    """Map a Drive HttpError to the FormHouse error a caller should see."""
    status = _status(err)
    detail = _error_payload(err).get("message") or str(err)

    if is_quota_error(err):
        return StorageQuotaUnavailable(
            "Cannot upload: service accounts don't have storage quota.\n"
            "Google Drive checks the service account's own quota when the destination folder "
            "is not shared with it. Share the service folder and the user folder "
            "(or the whole FormHouse folder, including subfolders) with the service account "
            "as Editor and try again."
        )
    if status == 403:
        return PermissionDenied(
            f"Permission denied on {what}. The folder may not be shared with the service "
            "account. Please check that it has Editor permissions."
        )
    if status == 404:
        return NotFound(
            f"{what} not found. It may be incorrect or not shared with the service account."
        )
    return fallback(f"Drive request for {what} failed: {detail}")


def _escape_query(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveClient:
    def __init__(self, service, service_account_email: Optional[str] = None):
        self.service = service
        self.service_account_email = service_account_email

    @classmethod
    def from_service_account_file(cls, credentials_path: str) -> "DriveClient":
        creds = Credentials.from_service_account_file(credentials_path, scopes=SCOPES)
        service = build("drive", "v3", credentials=creds, cache_discovery=False)
        return cls(service, creds.service_account_email)

    # ---------- lookups ----------

    def find_child_folder(self, parent_id: str, name: str) -> Optional[Dict[str, Any]]:
        query = (
            f"name='{_escape_query(name)}' and '{parent_id}' in parents "
            f"and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        )
        files = self._list(query, f"folder {name!r}")
        # Drive's name match is exact but be strict about it anyway
        for f in files:
            if f.get("name") == name:
                return f
        return None

    def find_folders_by_name(self, name: str) -> List[Dict[str, Any]]:
        query = f"name='{_escape_query(name)}' and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        return self._list(query, f"folder {name!r}")

    def _list(self, query: str, what: str) -> List[Dict[str, Any]]:
        try:
            response = (
                self.service.files()
                .list(
                    q=query,
                    fields="files(id, name, parents)",
                    includeItemsFromAllDrives=True,
                    supportsAllDrives=True,
                )
                .execute()
            )
        except HttpError as e:
            raise classify_http_error(e, what) from e
        return response.get("files", [])

    def get_file(self, file_id: str, fields: str = "id, name, parents, capabilities") -> Dict[str, Any]:
        try:
            return (
                self.service.files()
                .get(fileId=file_id, fields=fields, supportsAllDrives=True)
                .execute()
            )
        except HttpError as e:
            raise classify_http_error(e, f"folder {file_id}") from e

    # ---------- mutations ----------

    def create_folder(self, name: str, parent_id: str) -> Dict[str, Any]:
        body = {"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]}
        try:
            return (
                self.service.files()
                .create(body=body, fields="id, name, parents", supportsAllDrives=True)
                .execute()
            )
        except HttpError as e:
            raise classify_http_error(e, f"folder {name!r}") from e

    def list_permissions(self, file_id: str) -> List[Dict[str, Any]]:
        try:
            response = (
                self.service.permissions()
                .list(
                    fileId=file_id,
                    fields="permissions(id, emailAddress, role)",
                    supportsAllDrives=True,
                )
                .execute()
            )
        except HttpError as e:
            raise classify_http_error(e, f"permissions of {file_id}") from e
        return response.get("permissions", [])

    def create_permission(self, file_id: str, email: str, role: str = "writer") -> Dict[str, Any]:
        body = {"role": role, "type": "user", "emailAddress": email}
        try:
            return (
                self.service.permissions()
                .create(fileId=file_id, body=body, supportsAllDrives=True)
                .execute()
            )
        except HttpError as e:
            raise classify_http_error(e, f"permissions of {file_id}") from e

    def upload_file(self, name: str, content: bytes, mime_type: str, parent_id: str) -> Dict[str, Any]:
        media = MediaIoBaseUpload(io.BytesIO(content), mimetype=mime_type, resumable=False)
        body = {"name": name, "parents": [parent_id]}
        try:
            return (
                self.service.files()
                .create(
                    body=body,
                    media_body=media,
                    fields="id, name, webViewLink, size",
                    supportsAllDrives=True,
                )
                .execute()
            )
        except HttpError as e:
            logger.error("Drive upload of %s failed: %s", name, e)
            raise classify_http_error(e, f"upload folder {parent_id}", fallback=FileUploadError) from e
