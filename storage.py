# storage.py
"""Picks the storage backend named by FORMHOUSE_STORAGE."""

import logging
import os
from typing import Optional

from config import AppConfig
from storage_base import StorageAdapter
from storage_cloudinary import CloudinaryStorage
from storage_drive import DriveStorage
from storage_firebase import FirebaseStorage
from storage_local import LocalStorage

logger = logging.getLogger(__name__)

PROVIDER_TITLES = {
    "local": "Local storage",
    "drive": "Google Drive API",
    "firebase": "Firebase Storage",
    "cloudinary": "Cloudinary",
}


def _build_local(config: AppConfig) -> StorageAdapter:
    logger.info("Files will be stored locally in: %s", os.path.abspath(config.upload_dir))
    return LocalStorage(config.upload_dir)


def _build_drive(config: AppConfig) -> Optional[StorageAdapter]:
    if not os.path.exists(config.google_credentials_path):
        logger.warning(
            "%s not found. Google Drive features will be disabled.", config.google_credentials_path
        )
        return None
    return DriveStorage.from_credentials(
        config.google_credentials_path,
        root_ref=config.drive_folder_ref,
        root_name=config.root_name,
    )


def _build_firebase(config: AppConfig) -> Optional[StorageAdapter]:
    if not os.path.exists(config.firebase_credentials_path):
        logger.warning(
            "%s not found. Firebase Storage features will be disabled.",
            config.firebase_credentials_path,
        )
        return None
    return FirebaseStorage.from_service_account(
        config.firebase_credentials_path,
        bucket_name=config.firebase_bucket,
        root_name=config.root_name,
    )


def _build_cloudinary(config: AppConfig) -> Optional[StorageAdapter]:
    if not (config.cloudinary_cloud_name and config.cloudinary_api_key and config.cloudinary_api_secret):
        logger.warning("Cloudinary credentials not found. Cloudinary features will be disabled.")
        return None
    return CloudinaryStorage.from_credentials(
        config.cloudinary_cloud_name,
        config.cloudinary_api_key,
        config.cloudinary_api_secret,
        root_name=config.root_name,
    )


_BUILDERS = {
    "local": _build_local,
    "drive": _build_drive,
    "firebase": _build_firebase,
    "cloudinary": _build_cloudinary,
}


def build_storage(config: AppConfig) -> Optional[StorageAdapter]:
    """
    Returns the configured backend, or None when it cannot be used.

    A missing or broken backend does not stop the API from starting; /api/health
    reports "not configured" and submissions answer 503.
    """
    builder = _BUILDERS[config.storage_provider]
    try:
        return builder(config)
    except Exception:
        logger.exception("Error initializing %s", PROVIDER_TITLES[config.storage_provider])
        return None
