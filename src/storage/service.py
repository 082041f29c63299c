"""Firebase Storage service for certificate artifacts.

Stores rendered certificate PDFs under
``{prefix}/certificates/{certificate_id}.pdf`` and returns their public URL.
The Firebase SDK is blocking, so bucket calls run in a worker thread.
"""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote

import structlog
from fastapi import status

from src.core.exceptions import UpstreamError


if TYPE_CHECKING:
    from google.cloud.storage import Blob, Bucket

from src.config.settings import Settings


logger = structlog.get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class StorageError(UpstreamError):
    """Base error for storage operations."""

    def __init__(self, message: str, code: str = "storage_error") -> None:
        super().__init__(message, code)


class StorageNotConfiguredError(StorageError):
    """Error when Firebase Storage is not configured."""

    def __init__(self, message: str = "Firebase Storage is not configured") -> None:
        super().__init__(message, "storage_not_configured")


class StorageUploadError(StorageError):
    """Error during file upload."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "upload_error")


class StorageFileNotFoundError(StorageError):
    """Stored artifact is missing."""

    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, storage_path: str) -> None:
        super().__init__(f"File not found: {storage_path}", "file_not_found")


# Firebase app singleton
_firebase_app = None
_storage_bucket: "Bucket | None" = None


def _init_firebase(settings: Settings) -> "Bucket":
    """Initialize Firebase Admin SDK and get storage bucket.

    Raises:
        StorageNotConfiguredError: If Firebase is not configured.
    """
    global _firebase_app, _storage_bucket  # noqa: PLW0603

    if _storage_bucket is not None:
        return _storage_bucket

    if not settings.firebase_configured:
        raise StorageNotConfiguredError

    # Lazy import to avoid loading Firebase SDK unless needed
    import firebase_admin  # noqa: PLC0415
    from firebase_admin import credentials, storage  # noqa: PLC0415

    creds_path = settings.firebase_credentials_path
    if creds_path and not Path(creds_path).is_absolute():
        project_root = Path(__file__).parent.parent.parent
        creds_path = str(project_root / creds_path)

    if not creds_path or not Path(creds_path).exists():
        raise StorageNotConfiguredError(
            f"Firebase credentials file not found: {creds_path}"
        )

    try:
        if _firebase_app is None:
            cred = credentials.Certificate(creds_path)
            _firebase_app = firebase_admin.initialize_app(
                cred,
                {
                    "storageBucket": settings.firebase_storage_bucket,
                    "projectId": settings.firebase_project_id,
                },
            )
            logger.info(
                "firebase_initialized",
                project_id=settings.firebase_project_id,
                bucket=settings.firebase_storage_bucket,
            )

        _storage_bucket = storage.bucket()
        return _storage_bucket

    except Exception as e:
        logger.exception("firebase_init_failed", error=str(e))
        raise StorageNotConfiguredError(f"Failed to initialize Firebase: {e}") from e


class FirebaseStorageService:
    """Artifact store for certificate PDFs."""

    def __init__(self, settings: Settings) -> None:
        """Initialize storage service.

        Args:
            settings: Application settings.
        """
        self.settings = settings
        self._bucket: Bucket | None = None

    @property
    def is_configured(self) -> bool:
        """Check if Firebase Storage is configured."""
        return self.settings.firebase_configured

    def _ensure_configured(self) -> None:
        if not self.is_configured:
            raise StorageNotConfiguredError

    def _get_bucket(self) -> "Bucket":
        if self._bucket is None:
            self._bucket = _init_firebase(self.settings)
        return self._bucket

    def certificate_path(self, certificate_id: str) -> str:
        """Storage path of a certificate PDF."""
        prefix = self.settings.certificate_storage_prefix.strip("/")
        return f"{prefix}/certificates/{certificate_id}.pdf"

    def _generate_public_url(self, storage_path: str) -> str:
        bucket_name = self.settings.firebase_storage_bucket
        encoded_path = "/".join(
            quote(part, safe="") for part in storage_path.split("/")
        )
        return f"https://storage.googleapis.com/{bucket_name}/{encoded_path}"

    async def put_certificate(self, content: bytes, certificate_id: str) -> str:
        """Upload a certificate PDF.

        Args:
            content: PDF bytes.
            certificate_id: Certificate token, used as the file name.

        Returns:
            Public URL of the stored file.

        Raises:
            StorageNotConfiguredError: If Firebase is not configured.
            StorageUploadError: If upload fails.
        """
        self._ensure_configured()
        storage_path = self.certificate_path(certificate_id)

        def upload() -> None:
            blob: Blob = self._get_bucket().blob(storage_path)
            # Certificates are immutable once issued
            blob.cache_control = "public, max-age=31536000, immutable"
            blob.content_disposition = (
                f'inline; filename="certificate-{certificate_id}.pdf"'
            )
            blob.upload_from_string(content, content_type=PDF_CONTENT_TYPE)
            blob.make_public()

        try:
            await asyncio.to_thread(upload)
        except StorageNotConfiguredError:
            raise
        except Exception as e:
            logger.exception(
                "certificate_upload_failed",
                storage_path=storage_path,
                error=str(e),
            )
            raise StorageUploadError(f"Failed to upload certificate: {e}") from e

        logger.info(
            "certificate_uploaded",
            storage_path=storage_path,
            file_size=len(content),
            certificate_id=certificate_id,
        )
        return self._generate_public_url(storage_path)

    async def get_certificate(self, certificate_id: str) -> bytes:
        """Download a stored certificate PDF.

        Raises:
            StorageNotConfiguredError: If Firebase is not configured.
            StorageFileNotFoundError: If nothing is stored for the id.
            StorageUploadError: If the download fails.
        """
        self._ensure_configured()
        storage_path = self.certificate_path(certificate_id)

        def download() -> bytes | None:
            blob = self._get_bucket().blob(storage_path)
            if not blob.exists():
                return None
            return blob.download_as_bytes()

        try:
            content = await asyncio.to_thread(download)
        except StorageNotConfiguredError:
            raise
        except Exception as e:
            logger.exception(
                "certificate_download_failed", storage_path=storage_path, error=str(e)
            )
            raise StorageUploadError(f"Failed to download certificate: {e}") from e

        if content is None:
            raise StorageFileNotFoundError(storage_path)
        return content

    async def delete_certificate(self, certificate_id: str) -> bool:
        """Delete a stored certificate PDF.

        Returns:
            True if deleted, False if not found.

        Raises:
            StorageNotConfiguredError: If Firebase is not configured.
            StorageUploadError: If the delete fails.
        """
        self._ensure_configured()
        storage_path = self.certificate_path(certificate_id)

        def delete() -> bool:
            blob = self._get_bucket().blob(storage_path)
            if not blob.exists():
                return False
            blob.delete()
            return True

        try:
            deleted = await asyncio.to_thread(delete)
        except StorageNotConfiguredError:
            raise
        except Exception as e:
            logger.exception("delete_failed", storage_path=storage_path, error=str(e))
            raise StorageUploadError(f"Failed to delete file: {e}") from e

        if deleted:
            logger.info("file_deleted", storage_path=storage_path)
        else:
            logger.warning("delete_file_not_found", storage_path=storage_path)
        return deleted
