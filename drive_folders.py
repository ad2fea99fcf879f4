# drive_folders.py
"""
Folder resolution for the Google Drive backend.

Drive will happily create a "child" folder in the service account's own
(quota-less) drive when the nominal parent is not shared with it, and the
call looks successful. So every folder we hand out is checked twice: its
parent chain must reach the trusted FormHouse root, and the service account
must be able to edit it.
"""

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from errors import (
    FormHouseError,
    InvalidReference,
    NotFound,
    OrphanedLocation,
    PermissionDenied,
    StorageQuotaUnavailable,
)

logger = logging.getLogger(__name__)

_BARE_ID = re.compile(r"^[A-Za-z0-9_-]+$")
_FOLDERS_URL = re.compile(r"/folders/([A-Za-z0-9_-]+)")
_ID_PARAM = re.compile(r"[?&]id=([A-Za-z0-9_-]+)")

SHARING_STEPS = [
    "1. Open credentials.json and copy the client_email value",
    "2. Go to Google Drive and open your FormHouse folder",
    "3. Right-click on the folder > Share",
    "4. Paste the service account email",
    '5. Set permission to "Editor"',
    "6. Click Send",
    "7. Make sure the folder is in YOUR personal Google Drive, not the service account's drive",
]


def extract_folder_id(ref: Optional[str]) -> str:
    """Accept a bare folder id or a Drive URL containing one."""
    ref = (ref or "").strip()
    if not ref:
        raise InvalidReference("No folder id given.")
    if _BARE_ID.match(ref):
        return ref
    for pattern in (_FOLDERS_URL, _ID_PARAM):
        match = pattern.search(ref)
        if match:
            return match.group(1)
    raise InvalidReference(
        f"{ref!r} is neither a Drive folder id nor a Drive folder URL "
        "(expected https://drive.google.com/drive/folders/<id>)."
    )


@dataclass(frozen=True)
class FolderNode:
    id: str
    name: str = ""
    parents: Tuple[str, ...] = ()
    can_edit: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "FolderNode":
        capabilities = data.get("capabilities") or {}
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            parents=tuple(data.get("parents") or ()),
            can_edit=bool(capabilities.get("canEdit")),
        )


@dataclass
class FolderResolver:
    """
    Resolves root/service/user folders on Drive.

    `drive` is a DriveClient (or anything with the same primitives).
    `root_ref` is the configured FormHouse folder id or URL; when it is not set
    the root is looked up by `root_name`.
    """

    drive: Any
    root_ref: Optional[str] = None
    root_name: str = "FormHouse"
    root_id: Optional[str] = field(default=None, init=False)

    # ---------- trusted root ----------

    def resolve_root(self) -> FolderNode:
        if self.root_ref:
            folder_id = extract_folder_id(self.root_ref)
            logger.debug("Using FormHouse folder id from configuration: %s", folder_id)
        else:
            matches = self.drive.find_folders_by_name(self.root_name)
            if not matches:
                raise NotFound(
                    f'{self.root_name} folder not found. Create a folder named "{self.root_name}" '
                    "in your Google Drive, share it with the service account email (found in "
                    "credentials.json) as Editor, or set FORMHOUSE_FOLDER_ID.",
                    title=f"{self.root_name} folder not found",
                )
            folder_id = matches[0]["id"]
            logger.debug("Found %s folder: %s", self.root_name, folder_id)

        root = self.validate_access(folder_id)
        self.root_id = root.id
        logger.info('Folder access validated: "%s"', root.name or root.id)
        return root

    def trusted_root(self) -> str:
        if self.root_id is None:
            self.resolve_root()
        return self.root_id

    def validate_access(self, folder_id: str) -> FolderNode:
        try:
            node = self._fetch(folder_id)
        except NotFound as e:
            raise NotFound(
                f'Folder not found or not accessible. The folder id "{folder_id}" may be '
                "incorrect, or the folder is not shared with your service account.\n\n"
                "To fix this:\n" + "\n".join(SHARING_STEPS),
                title="Folder not found",
            ) from e
        if not node.can_edit:
            raise PermissionDenied(
                f'Service account does not have Editor permissions on folder "{node.name or folder_id}".'
            )
        return node

    # ---------- find or create ----------

    def find_or_create_folder(self, parent_ref: str, name: str) -> str:
        parent_id = extract_folder_id(parent_ref)

        existing = self.drive.find_child_folder(parent_id, name)
        if existing:
            folder_id = existing["id"]
            logger.debug('Found folder "%s": %s', name, folder_id)
        else:
            folder_id = self._create_under(parent_id, name)

        self.verify_ancestry(folder_id)

        folder = self._fetch(folder_id)
        if not folder.can_edit:
            raise PermissionDenied(
                f'Cannot write to folder "{name}". It may have been created in the service '
                "account's drive instead of the shared folder.\n"
                f"Parent folder id: {parent_id}\n"
                "Please ensure the parent folder is shared with Editor permissions."
            )
        return folder_id

    def _create_under(self, parent_id: str, name: str) -> str:
        try:
            parent = self._fetch(parent_id)
        except NotFound as e:
            raise NotFound(
                f"Parent folder not found: {parent_id}\n"
                "The folder may not be shared with the service account or may not exist.",
                title="Parent folder not found",
            ) from e
        if not parent.can_edit:
            raise PermissionDenied(
                f'Cannot create folder: parent folder "{parent.name or parent_id}" does not have '
                "Editor permissions. Share it with the service account as Editor."
            )

        logger.info('Creating folder "%s" in parent %s', name, parent_id)
        try:
            created = self.drive.create_folder(name, parent_id)
        except StorageQuotaUnavailable as e:
            raise StorageQuotaUnavailable(
                "Cannot create folder: service accounts don't have storage quota.\n"
                f'Please create the folder "{name}" manually in your shared FormHouse folder '
                "and share it with the service account."
            ) from e

        folder_id = created["id"]
        logger.info('Created folder "%s": %s (parents %s)', name, folder_id, created.get("parents") or [])
        self._share_with_service_account(folder_id, name)
        return folder_id

    def _share_with_service_account(self, folder_id: str, name: str) -> None:
        email = getattr(self.drive, "service_account_email", None)
        if not email:
            return
        try:
            permissions = self.drive.list_permissions(folder_id)
            has_permission = any(
                p.get("emailAddress") == email and p.get("role") in ("writer", "owner")
                for p in permissions
            )
            if has_permission:
                logger.debug('Folder "%s" already has service account permissions', name)
                return
            self.drive.create_permission(folder_id, email, role="writer")
            logger.info('Folder "%s" shared with service account', name)
        except FormHouseError as e:
            # the folder exists at this point; the checks that follow decide if it is usable
            logger.warning('Could not share folder "%s" with service account: %s', name, e.message)

    # ---------- verification ----------

    def verify_ancestry(self, folder_id: str) -> List[str]:
        """
        Walk parent links upward until the trusted root is reached.

        Returns the chain of ids from `folder_id` to the root. Raises
        OrphanedLocation when the parents run out first. Unreadable parents
        are dead ends; the visited set stops cycles and repeated parents.
        """
        root_id = self.trusted_root()
        if folder_id == root_id:
            return [folder_id]

        start = self._fetch(folder_id)
        came_from: Dict[str, Optional[str]] = {folder_id: None}
        queue = deque((p, folder_id) for p in start.parents)

        while queue:
            current, child = queue.popleft()
            if current in came_from:
                continue
            came_from[current] = child

            if current == root_id:
                chain = [current]
                while came_from[chain[-1]] is not None:
                    chain.append(came_from[chain[-1]])
                return list(reversed(chain))

            try:
                node = self._fetch(current)
            except FormHouseError as e:
                logger.debug("Skipping unreadable parent %s: %s", current, e.message)
                continue
            queue.extend((p, current) for p in node.parents)

        raise OrphanedLocation(
            f'Folder "{start.name or folder_id}" is NOT in your shared {self.root_name} folder.\n'
            "It is most likely in the service account's drive, which has no storage quota.\n\n"
            "To fix:\n"
            "1. Delete this folder in Google Drive\n"
            f"2. Make sure your {self.root_name} folder is shared with the service account as Editor\n"
            "3. Submit again; the folder will be recreated in the right place"
        )

    def _fetch(self, folder_id: str) -> FolderNode:
        return FolderNode.from_api(self.drive.get_file(folder_id))
