# client.py
# Backend helpers for the Streamlit front end (app.py).

import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from form_config import ServiceDescriptor, list_services

# ==============================
# Backend Endpoints
# ==============================
BASE_URL = os.getenv("FORMHOUSE_API_URL", "http://localhost:3000/api").rstrip("/")

# the form caps files at 5MB whatever the backend allows
CLIENT_MAX_FILE_SIZE = 5 * 1024 * 1024
ACCEPTED_TYPES = ["pdf", "jpg", "jpeg", "png", "doc", "docx"]

# (filename, content, mime type)
FilePart = Tuple[str, bytes, str]


def missing_fields(**values: Optional[str]) -> List[str]:
    return [k for k, v in values.items() if not (v or "").strip()]


def oversized_files(files: Sequence[FilePart], max_bytes: int = CLIENT_MAX_FILE_SIZE) -> List[str]:
    return [name for name, content, _ in files if len(content) > max_bytes]


def catalog_entry(service: ServiceDescriptor) -> Dict[str, Any]:
    """A bundled catalog entry in the shape GET /services/{key} returns."""
    return {
        "key": service.key,
        "name": service.name,
        "icon": service.icon,
        "description": service.description,
        "category": service.category,
        "documents": list(service.documents),
        "rechargeOptions": [{"name": o.name, "icon": o.icon} for o in service.recharge_options],
    }


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or body.get("detail") or f"HTTP {resp.status_code}"
    return f"HTTP {resp.status_code}"


class FormHouseClient:
    def __init__(self, base_url: str = BASE_URL, timeout: float = 30, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def health(self) -> Optional[Dict[str, Any]]:
        """None when the backend cannot be reached."""
        try:
            resp = self.session.get(f"{self.base_url}/health", timeout=5)
            resp.raise_for_status()
            return resp.json()
        except requests.RequestException:
            return None

    def list_services(self) -> List[Dict[str, str]]:
        resp = self.session.get(f"{self.base_url}/services", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json().get("services", [])

    def get_service(self, key: str) -> Dict[str, Any]:
        resp = self.session.get(f"{self.base_url}/services/{key}", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def load_catalog(self) -> Dict[str, Dict[str, Any]]:
        """
        Every service's detail keyed by service key, from the API. Falls back
        to the bundled catalog when the backend cannot be reached.
        """
        try:
            return {s["key"]: self.get_service(s["key"]) for s in self.list_services()}
        except requests.RequestException:
            return {s.key: catalog_entry(s) for s in list_services()}

    def submit(self, service: str, name: str, phone: str, email: str,
               files: Sequence[FilePart] = ()) -> Dict[str, Any]:
        data = {"service": service, "name": name, "phone": phone, "email": email}
        parts = [("files", (fname, content, mime)) for fname, content, mime in files]
        try:
            resp = self.session.post(
                f"{self.base_url}/submit", data=data, files=parts or None, timeout=self.timeout
            )
        except requests.RequestException as e:
            return {"ok": False, "error": str(e)}

        if resp.ok:
            body = resp.json()
            if body.get("success"):
                return {"ok": True, "response": body}
            return {"ok": False, "error": body.get("message") or "Failed to submit form"}
        return {"ok": False, "error": _error_message(resp), "status": resp.status_code}
