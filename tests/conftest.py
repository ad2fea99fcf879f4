"""
Shared fixtures: an in-memory Drive, app configs pointing at tmp_path and
TestClients built from them.
"""

import itertools
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from config import AppConfig
from errors import NotFound, StorageQuotaUnavailable
from main import create_app

SERVICE_ACCOUNT = "formhouse@demo-project.iam.gserviceaccount.com"


class FakeDrive:
    """Just enough of DriveClient, backed by a dict of folders."""

    def __init__(self, service_account_email: Optional[str] = SERVICE_ACCOUNT):
        self.service_account_email = service_account_email
        self.nodes: Dict[str, Dict[str, Any]] = {}
        self.permissions: Dict[str, List[Dict[str, str]]] = {}
        self.created: List[str] = []
        self.uploads: List[Dict[str, Any]] = []
        self._ids = itertools.count(1)

        # knobs for failure modes
        self.create_lands_in: Optional[str] = None
        self.new_folders_editable = True
        self.quota_on_create = False
        self.share_error: Optional[Exception] = None
        self.upload_errors: Dict[str, Exception] = {}

    def add_folder(self, folder_id, name, parents=(), can_edit=True, trashed=False):
        self.nodes[folder_id] = {
            "id": folder_id,
            "name": name,
            "parents": list(parents),
            "can_edit": can_edit,
            "trashed": trashed,
        }
        return folder_id

    # ---------- DriveClient primitives ----------

    def find_child_folder(self, parent_id, name):
        for node in self.nodes.values():
            if node["name"] == name and parent_id in node["parents"] and not node["trashed"]:
                return {"id": node["id"], "name": node["name"], "parents": node["parents"]}
        return None

    def find_folders_by_name(self, name):
        return [
            {"id": n["id"], "name": n["name"], "parents": n["parents"]}
            for n in self.nodes.values()
            if n["name"] == name and not n["trashed"]
        ]

    def get_file(self, file_id, fields=None):
        node = self.nodes.get(file_id)
        if node is None:
            raise NotFound(f"folder {file_id} not found")
        return {
            "id": node["id"],
            "name": node["name"],
            "parents": list(node["parents"]),
            "capabilities": {"canEdit": node["can_edit"]},
        }

    def create_folder(self, name, parent_id):
        if self.quota_on_create:
            raise StorageQuotaUnavailable("quota")
        folder_id = f"folder-{next(self._ids)}"
        parent = self.create_lands_in or parent_id
        self.add_folder(folder_id, name, parents=[parent], can_edit=self.new_folders_editable)
        self.created.append(folder_id)
        return {"id": folder_id, "name": name, "parents": [parent]}

    def list_permissions(self, file_id):
        if self.share_error:
            raise self.share_error
        return list(self.permissions.get(file_id, []))

    def create_permission(self, file_id, email, role="writer"):
        self.permissions.setdefault(file_id, []).append({"emailAddress": email, "role": role})
        return {"id": f"perm-{file_id}"}

    def upload_file(self, name, content, mime_type, parent_id):
        if name in self.upload_errors:
            raise self.upload_errors[name]
        file_id = f"file-{next(self._ids)}"
        self.uploads.append(
            {"id": file_id, "name": name, "content": content, "mime_type": mime_type, "parent": parent_id}
        )
        return {
            "id": file_id,
            "name": name,
            "webViewLink": f"https://drive.google.com/file/d/{file_id}/view",
            "size": str(len(content)),
        }


@pytest.fixture
def fake_drive():
    drive = FakeDrive()
    drive.add_folder("root-id", "FormHouse", parents=["my-drive"])
    return drive


@pytest.fixture
def local_config(tmp_path):
    return AppConfig(
        storage_provider="local",
        upload_dir=str(tmp_path / "uploads"),
        database_url=f"sqlite:///{tmp_path / 'formhouse.db'}",
    )


@pytest.fixture
def drive_config(tmp_path):
    return AppConfig(
        storage_provider="drive",
        upload_dir=str(tmp_path / "uploads"),
        max_file_size=5 * 1024 * 1024,
        google_credentials_path=str(tmp_path / "missing-credentials.json"),
        drive_folder_ref="root-id",
        database_url=f"sqlite:///{tmp_path / 'formhouse.db'}",
    )


@pytest.fixture
def client(local_config):
    return TestClient(create_app(local_config))
