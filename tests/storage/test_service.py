"""Tests for the Firebase certificate store with a mocked bucket."""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from src.storage.service import (
    FirebaseStorageService,
    StorageFileNotFoundError,
    StorageNotConfiguredError,
    StorageUploadError,
)


@pytest.fixture
def bucket():
    bucket = Mock()
    bucket.blob.return_value = Mock()
    return bucket


@pytest.fixture
def storage(bucket) -> FirebaseStorageService:
    settings = SimpleNamespace(
        firebase_configured=True,
        certificate_storage_prefix="/lms/",
        firebase_storage_bucket="coursetrack.appspot.com",
    )
    service = FirebaseStorageService(settings)
    service._bucket = bucket
    return service


class TestFirebaseStorageService:
    """Tests for certificate upload, download and delete."""

    def test_certificate_path(self, storage: FirebaseStorageService):
        """Should place PDFs under the prefix."""
        assert storage.certificate_path("abc") == "lms/certificates/abc.pdf"

    @pytest.mark.asyncio
    async def test_put_certificate(self, storage, bucket):
        """Should upload a public PDF and return its URL."""
        url = await storage.put_certificate(b"%PDF-1.4", "abc")

        bucket.blob.assert_called_once_with("lms/certificates/abc.pdf")
        blob = bucket.blob.return_value
        blob.upload_from_string.assert_called_once_with(
            b"%PDF-1.4", content_type="application/pdf"
        )
        blob.make_public.assert_called_once()
        assert url == (
            "https://storage.googleapis.com/coursetrack.appspot.com/"
            "lms/certificates/abc.pdf"
        )

    @pytest.mark.asyncio
    async def test_put_failure(self, storage, bucket):
        """Should wrap SDK errors in StorageUploadError."""
        bucket.blob.return_value.upload_from_string.side_effect = RuntimeError("503")

        with pytest.raises(StorageUploadError):
            await storage.put_certificate(b"%PDF-1.4", "abc")

    @pytest.mark.asyncio
    async def test_get_missing(self, storage, bucket):
        """Should raise when nothing is stored for the id."""
        bucket.blob.return_value.exists.return_value = False

        with pytest.raises(StorageFileNotFoundError):
            await storage.get_certificate("abc")

    @pytest.mark.asyncio
    async def test_delete(self, storage, bucket):
        """Should delete an existing blob."""
        bucket.blob.return_value.exists.return_value = True

        assert await storage.delete_certificate("abc") is True
        bucket.blob.return_value.delete.assert_called_once()

    @pytest.mark.asyncio
    async def test_not_configured(self):
        """Should refuse to upload without Firebase settings."""
        service = FirebaseStorageService(SimpleNamespace(firebase_configured=False))

        with pytest.raises(StorageNotConfiguredError):
            await service.put_certificate(b"%PDF-1.4", "abc")
