"""Storage module for certificate artifacts in Firebase Storage."""

from src.storage.service import (
    FirebaseStorageService,
    StorageError,
    StorageFileNotFoundError,
    StorageNotConfiguredError,
    StorageUploadError,
)


__all__ = [
    "FirebaseStorageService",
    "StorageError",
    "StorageFileNotFoundError",
    "StorageNotConfiguredError",
    "StorageUploadError",
]
