# config.py
"""
Runtime configuration.

Values come from the environment (optionally a .env file next to the app).
load_config() is called once at start-up and the resulting AppConfig is
handed to whatever needs it.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

STORAGE_PROVIDERS = ("local", "drive", "firebase", "cloudinary")

# Drive uploads are capped at 5MB, every other backend at 10MB.
DEFAULT_MAX_FILE_SIZE_MB = {"drive": 5}
FALLBACK_MAX_FILE_SIZE_MB = 10


@dataclass(frozen=True)
class AppConfig:
    storage_provider: str = "local"
    upload_dir: str = "uploads"
    max_file_size: int = FALLBACK_MAX_FILE_SIZE_MB * 1024 * 1024
    root_name: str = "FormHouse"

    # Google Drive
    google_credentials_path: str = "credentials.json"
    drive_folder_ref: Optional[str] = None

    # Firebase
    firebase_credentials_path: str = "firebase-service-account.json"
    firebase_bucket: Optional[str] = None

    # Cloudinary
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None

    database_url: str = "sqlite:///formhouse.db"
    log_level: str = "INFO"
    port: int = 3000

    @property
    def max_file_size_mb(self) -> float:
        return self.max_file_size / (1024 * 1024)


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config() -> AppConfig:
    provider = (_env("FORMHOUSE_STORAGE") or "local").lower()
    if provider not in STORAGE_PROVIDERS:
        raise RuntimeError(
            f"FORMHOUSE_STORAGE must be one of {', '.join(STORAGE_PROVIDERS)}, got {provider!r}"
        )

    size_mb = _env("FORMHOUSE_MAX_FILE_SIZE_MB")
    if size_mb is not None:
        max_mb = float(size_mb)
    else:
        max_mb = DEFAULT_MAX_FILE_SIZE_MB.get(provider, FALLBACK_MAX_FILE_SIZE_MB)

    return AppConfig(
        storage_provider=provider,
        upload_dir=_env("FORMHOUSE_UPLOAD_DIR") or "uploads",
        max_file_size=int(max_mb * 1024 * 1024),
        root_name=_env("FORMHOUSE_ROOT_NAME") or "FormHouse",
        google_credentials_path=_env("GOOGLE_CREDENTIALS_PATH") or "credentials.json",
        drive_folder_ref=_env("FORMHOUSE_FOLDER_ID"),
        firebase_credentials_path=_env("FIREBASE_CREDENTIALS_PATH")
        or "firebase-service-account.json",
        firebase_bucket=_env("FIREBASE_STORAGE_BUCKET"),
        cloudinary_cloud_name=_env("CLOUDINARY_CLOUD_NAME"),
        cloudinary_api_key=_env("CLOUDINARY_API_KEY"),
        cloudinary_api_secret=_env("CLOUDINARY_API_SECRET"),
        database_url=_env("FORMHOUSE_DATABASE_URL") or "sqlite:///formhouse.db",
        log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        port=int(_env("PORT") or 3000),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
