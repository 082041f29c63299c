"""Certificate issuance service layer.

Business logic for:
- Automatic issuance when an enrollment reaches 100% progress
- Explicit issuance on request, gated on completion
- Public verification by certificate id
- Listing and downloading issued certificates

Each (student, course) pair moves from "no certificate" to "issued" exactly
once. The creation race is settled by the storage layer, never by a
check-then-write in this process.
"""

import asyncio
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog

from src.core.exceptions import (
    CertificateIssuanceError,
    CertificateNotFoundError,
    CourseNotCompletedError,
    InvalidCertificateIdError,
    UpstreamError,
)

from .models import Certificate
from .renderer import CertificateTemplateData


if TYPE_CHECKING:
    from src.courses.service import CourseCatalogService
    from src.progress.service import ProgressService
    from src.storage.service import FirebaseStorageService
    from src.students.service import StudentService

    from .renderer import CertificateRenderer
    from .repository import CertificateRepository

logger = structlog.get_logger(__name__)


def is_valid_certificate_id(certificate_id: str) -> bool:
    """Check that a token has the shape of an issued certificate id."""
    try:
        return str(UUID(certificate_id)) == certificate_id.lower()
    except ValueError:
        return False


class CertificateService:
    """Service for issuing and verifying certificates."""

    def __init__(
        self,
        repository: "CertificateRepository",
        renderer: "CertificateRenderer",
        storage: "FirebaseStorageService",
        students: "StudentService",
        catalog: "CourseCatalogService",
        progress_service: "ProgressService",
        verify_base_url: str,
    ):
        self.repository = repository
        self.renderer = renderer
        self.storage = storage
        self.students = students
        self.catalog = catalog
        self.progress_service = progress_service
        self.verify_base_url = verify_base_url.rstrip("/")

    def verify_url(self, certificate_id: str) -> str:
        """Public verification URL of a certificate."""
        return f"{self.verify_base_url}/{certificate_id}"

    # ==========================================================================
    # Issuance
    # ==========================================================================

    async def find_certificate(
        self, student_id: UUID, course_id: UUID
    ) -> Certificate | None:
        """Get the certificate of a pair, or None."""
        return await self.repository.find_by_pair(student_id, course_id)

    async def on_progress_updated(
        self, student_id: UUID, course_id: UUID, new_progress: int
    ) -> Certificate | None:
        """Issue the certificate when progress reaches 100.

        Returns:
            None below 100, otherwise the (possibly pre-existing) certificate

        Raises:
            CertificateIssuanceError: If rendering or storing the artifact failed
            CertificateStoreUnavailableError: If the certificate tables are unreachable
        """
        if new_progress != 100:
            return None

        existing = await self.find_certificate(student_id, course_id)
        if existing is not None:
            await self._repair_lookups(existing)
            return existing

        return await self._issue(student_id, course_id)

    async def get_or_issue_certificate(
        self, student_id: UUID, course_id: UUID
    ) -> Certificate:
        """Explicit issuance path.

        Raises:
            EnrollmentNotFoundError: If the student is not enrolled
            CourseNotCompletedError: If progress is below 100
            CertificateIssuanceError: If rendering or storing the artifact failed
            CertificateStoreUnavailableError: If the certificate tables are unreachable
        """
        existing = await self.find_certificate(student_id, course_id)
        if existing is not None:
            await self._repair_lookups(existing)
            return existing

        course_progress = await self.progress_service.get_course_progress(
            student_id, course_id
        )
        if not course_progress.is_completed:
            raise CourseNotCompletedError(course_progress.progress)

        return await self._issue(student_id, course_id)

    async def _issue(self, student_id: UUID, course_id: UUID) -> Certificate:
        student = await self.students.get_student(student_id)
        course = await self.catalog.get_course(course_id)

        certificate = Certificate(
            student_id=student_id,
            course_id=course_id,
            student_name=student.full_name,
            course_title=course.title,
        )
        template = CertificateTemplateData(
            certificate_id=certificate.certificate_id,
            student_name=certificate.student_name,
            course_title=certificate.course_title,
            issued_at=certificate.issued_at,
            verify_url=self.verify_url(certificate.certificate_id),
        )

        try:
            content = await asyncio.to_thread(self.renderer.render, template)
            certificate.file_url = await self.storage.put_certificate(
                content, certificate.certificate_id
            )
        except UpstreamError as e:
            logger.warning(
                "certificate_artifact_failed",
                student_id=str(student_id),
                course_id=str(course_id),
                code=e.code,
                error=e.message,
            )
            raise CertificateIssuanceError from e

        if await self.repository.create_if_absent(certificate):
            logger.info(
                "certificate_issued",
                certificate_id=certificate.certificate_id,
                student_id=str(student_id),
                course_id=str(course_id),
            )
            return certificate

        # Another request issued first; its certificate is the one that counts
        winner = await self.repository.find_by_pair(student_id, course_id)
        logger.info(
            "certificate_issue_race_lost",
            student_id=str(student_id),
            course_id=str(course_id),
            discarded_certificate_id=certificate.certificate_id,
        )
        await self._discard_artifact(certificate.certificate_id)

        if winner is None:
            raise CertificateIssuanceError
        await self._repair_lookups(winner)
        return winner

    async def _repair_lookups(self, certificate: Certificate) -> None:
        # Lookup writes of the issuing call may have failed after its insert
        try:
            await self.repository.ensure_lookups(certificate)
        except UpstreamError as e:
            logger.warning(
                "certificate_lookup_repair_failed",
                certificate_id=certificate.certificate_id,
                error=e.message,
            )

    async def _discard_artifact(self, certificate_id: str) -> None:
        try:
            await self.storage.delete_certificate(certificate_id)
        except UpstreamError as e:
            logger.warning(
                "orphan_certificate_artifact",
                certificate_id=certificate_id,
                error=e.message,
            )

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def verify_certificate(self, certificate_id: str) -> dict[str, Any]:
        """Public verification of a certificate token.

        Unknown or malformed ids are reported as ``{"valid": False}``.
        """
        if not is_valid_certificate_id(certificate_id):
            return {"valid": False}

        certificate = await self.repository.find_by_id(certificate_id)
        if certificate is None:
            logger.info("certificate_verification_failed", certificate_id=certificate_id)
            return {"valid": False}

        return {
            "valid": True,
            "certificate_id": certificate.certificate_id,
            "student_name": certificate.student_name,
            "course_title": certificate.course_title,
            "issued_at": certificate.issued_at,
            "file_url": certificate.file_url,
        }

    async def get_certificate(self, certificate_id: str) -> Certificate:
        """Get certificate by id.

        Raises:
            InvalidCertificateIdError: If the id is malformed
            CertificateNotFoundError: If no certificate has this id
        """
        if not is_valid_certificate_id(certificate_id):
            raise InvalidCertificateIdError

        certificate = await self.repository.find_by_id(certificate_id)
        if certificate is None:
            raise CertificateNotFoundError
        return certificate

    async def get_certificate_file(self, certificate_id: str) -> tuple[Certificate, bytes]:
        """Get a certificate together with its stored PDF."""
        certificate = await self.get_certificate(certificate_id)
        content = await self.storage.get_certificate(certificate.certificate_id)
        return certificate, content

    async def list_student_certificates(self, student_id: UUID) -> list[Certificate]:
        """List all certificates of a student."""
        return await self.repository.list_by_student(student_id)
