"""Content completion workflow.

Marks content complete and, once the enrollment reaches 100%, hands off to
certificate issuance. Issuance runs only after the progress update has been
committed; its failures are reported as a pending certificate and never undo
the completion.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal
from uuid import UUID

import structlog

from src.core.context import RequestContext, get_context
from src.core.exceptions import LMSError

from .models import Enrollment


if TYPE_CHECKING:
    from src.certificates.models import Certificate
    from src.certificates.service import CertificateService

    from .service import ProgressService

logger = structlog.get_logger(__name__)

# Same call shape as BackgroundTasks.add_task
Scheduler = Callable[..., None]


class CertificateStatus(str, Enum):
    """Certificate state reported with a completion."""

    NOT_ELIGIBLE = "not_eligible"
    ISSUED = "issued"
    PENDING = "pending"


@dataclass
class CompletionOutcome:
    """Result of a content completion."""

    enrollment: Enrollment
    was_new: bool
    certificate_status: CertificateStatus
    certificate: "Certificate | None" = None


class CompletionWorkflow:
    """Completion tracking followed by certificate issuance."""

    def __init__(
        self,
        progress_service: "ProgressService",
        certificate_service: "CertificateService",
        issue_mode: Literal["inline", "deferred"] = "deferred",
    ):
        self.progress_service = progress_service
        self.certificate_service = certificate_service
        self.issue_mode = issue_mode

    async def complete_content(
        self,
        student_id: UUID,
        course_id: UUID,
        content_id: UUID,
        schedule: Scheduler | None = None,
    ) -> CompletionOutcome:
        """Mark a content item complete and trigger issuance at 100%.

        Args:
            student_id: Student UUID
            course_id: Course UUID
            content_id: Content item UUID
            schedule: Runs issuance after the response in deferred mode;
                issuance is awaited inline when absent

        Raises:
            LMSError: Any completion error (issuance errors are absorbed)
        """
        enrollment, was_new = await self.progress_service.mark_content_complete(
            student_id, course_id, content_id
        )

        if not enrollment.is_completed:
            return CompletionOutcome(
                enrollment=enrollment,
                was_new=was_new,
                certificate_status=CertificateStatus.NOT_ELIGIBLE,
            )

        if self.issue_mode == "deferred" and schedule is not None:
            existing = await self._find_existing(student_id, course_id)
            if existing is not None:
                return CompletionOutcome(
                    enrollment=enrollment,
                    was_new=was_new,
                    certificate_status=CertificateStatus.ISSUED,
                    certificate=existing,
                )

            schedule(
                self.issue_in_background,
                student_id,
                course_id,
                enrollment.progress,
                get_context(),
            )
            logger.info(
                "certificate_issue_scheduled",
                student_id=str(student_id),
                course_id=str(course_id),
            )
            return CompletionOutcome(
                enrollment=enrollment,
                was_new=was_new,
                certificate_status=CertificateStatus.PENDING,
            )

        certificate = await self._try_issue(student_id, course_id, enrollment.progress)
        return CompletionOutcome(
            enrollment=enrollment,
            was_new=was_new,
            certificate_status=(
                CertificateStatus.ISSUED if certificate else CertificateStatus.PENDING
            ),
            certificate=certificate,
        )

    async def issue_in_background(
        self,
        student_id: UUID,
        course_id: UUID,
        progress: int,
        context: dict[str, Any],
    ) -> None:
        """Background entry point; logs under the originating request's context."""
        with RequestContext(**context):
            await self._try_issue(student_id, course_id, progress)

    async def _find_existing(
        self, student_id: UUID, course_id: UUID
    ) -> "Certificate | None":
        try:
            return await self.certificate_service.find_certificate(
                student_id, course_id
            )
        except LMSError as e:
            # Progress is committed; the background task retries the lookup
            logger.warning(
                "certificate_lookup_failed",
                student_id=str(student_id),
                course_id=str(course_id),
                code=e.code,
                error=e.message,
            )
            return None

    async def _try_issue(
        self, student_id: UUID, course_id: UUID, progress: int
    ) -> "Certificate | None":
        try:
            return await self.certificate_service.on_progress_updated(
                student_id, course_id, progress
            )
        except LMSError as e:
            logger.error(
                "certificate_issuance_failed",
                student_id=str(student_id),
                course_id=str(course_id),
                code=e.code,
                error=e.message,
            )
            return None
