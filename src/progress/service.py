"""Enrollment progress service layer.

Business logic for:
- Course enrollment (one per student and course)
- Idempotent content completion with progress recomputation
- Progress queries against the live course catalog
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.core.exceptions import (
    AlreadyEnrolledError,
    ConcurrentUpdateError,
    EnrollmentNotFoundError,
)

from .models import CourseProgress, Enrollment, EnrollmentSummary
from .tracker import compute_progress


if TYPE_CHECKING:
    from src.courses.service import CourseCatalogService
    from src.students.service import StudentService

    from .repository import EnrollmentRepository

logger = structlog.get_logger(__name__)


class ProgressService:
    """Service for enrollments and content completion."""

    def __init__(
        self,
        repository: "EnrollmentRepository",
        catalog: "CourseCatalogService",
        students: "StudentService",
        max_update_retries: int = 5,
    ):
        self.repository = repository
        self.catalog = catalog
        self.students = students
        self.max_update_retries = max_update_retries

    # ==========================================================================
    # Enrollment
    # ==========================================================================

    async def enroll(self, student_id: UUID, course_id: UUID) -> Enrollment:
        """Enroll a student in a course.

        Raises:
            StudentNotFoundError: If the student does not exist
            CourseNotFoundError: If the course does not exist
            AlreadyEnrolledError: If the pair is already enrolled
        """
        await self.students.get_student(student_id)
        await self.catalog.get_course(course_id)

        enrollment = Enrollment(student_id=student_id, course_id=course_id)
        if not await self.repository.insert_if_absent(enrollment):
            raise AlreadyEnrolledError

        logger.info(
            "student_enrolled",
            student_id=str(student_id),
            course_id=str(course_id),
        )
        return enrollment

    async def get_enrollment(self, student_id: UUID, course_id: UUID) -> Enrollment:
        """Get the stored enrollment for a pair.

        Raises:
            EnrollmentNotFoundError: If the student is not enrolled
        """
        enrollment = await self.repository.find(student_id, course_id)
        if enrollment is None:
            raise EnrollmentNotFoundError
        return enrollment

    async def list_student_enrollments(
        self, student_id: UUID
    ) -> list[EnrollmentSummary]:
        """List all enrollments of a student."""
        return await self.repository.list_by_student(student_id)

    # ==========================================================================
    # Completion
    # ==========================================================================

    async def mark_content_complete(
        self, student_id: UUID, course_id: UUID, content_id: UUID
    ) -> tuple[Enrollment, bool]:
        """Mark a content item as completed.

        Completing an item twice is a no-op that returns the stored enrollment.
        Concurrent completions on the same enrollment are serialized by a
        compare-and-set on the enrollment version; a lost race re-reads and
        retries.

        Returns:
            Tuple of (enrollment after the call, whether the item was new)

        Raises:
            ContentNotFoundError: If the content item does not exist
            ContentNotInCourseError: If the item belongs to another course
            EnrollmentNotFoundError: If the student is not enrolled
            ConcurrentUpdateError: If every attempt lost against other writers
        """
        await self.catalog.ensure_content_in_course(course_id, content_id)

        for attempt in range(1, self.max_update_retries + 1):
            enrollment = await self.get_enrollment(student_id, course_id)
            if enrollment.has_completed(content_id):
                logger.debug(
                    "content_already_completed",
                    student_id=str(student_id),
                    course_id=str(course_id),
                    content_id=str(content_id),
                )
                return enrollment, False

            content_count = await self.catalog.get_content_count(course_id)
            updated = enrollment.with_completion(
                content_id, datetime.now(UTC), content_count
            )
            if await self.repository.compare_and_set(updated, enrollment.version):
                logger.info(
                    "content_completed",
                    student_id=str(student_id),
                    course_id=str(course_id),
                    content_id=str(content_id),
                    progress=updated.progress,
                    attempt=attempt,
                )
                return updated, True

        logger.warning(
            "content_completion_gave_up",
            student_id=str(student_id),
            course_id=str(course_id),
            content_id=str(content_id),
            attempts=self.max_update_retries,
        )
        raise ConcurrentUpdateError

    async def record_completion(
        self, student_id: UUID, course_id: UUID, content_id: UUID
    ) -> tuple[int, bool]:
        """Record a completion and return (progress, was_new)."""
        enrollment, was_new = await self.mark_content_complete(
            student_id, course_id, content_id
        )
        return enrollment.progress, was_new

    # ==========================================================================
    # Queries
    # ==========================================================================

    async def get_course_progress(
        self, student_id: UUID, course_id: UUID
    ) -> CourseProgress:
        """Get progress recomputed against the current catalog size.

        Raises:
            EnrollmentNotFoundError: If the student is not enrolled
            CourseNotFoundError: If the course no longer exists
        """
        enrollment = await self.get_enrollment(student_id, course_id)
        total_items = await self.catalog.get_content_count(course_id)
        return CourseProgress(
            enrollment=enrollment,
            progress=compute_progress(total_items, enrollment.completed_content),
            total_items=total_items,
        )
