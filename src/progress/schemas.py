"""Pydantic schemas for enrollment progress.

Request and response models for:
- Course enrollment
- Content completion
- Progress queries
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.certificates.schemas import CertificateResponse

from .models import ContentCompletion, CourseProgress, Enrollment, EnrollmentSummary
from .workflow import CertificateStatus, CompletionOutcome


# ==============================================================================
# Enrollment Schemas
# ==============================================================================


class EnrollRequest(BaseModel):
    """Request to enroll a student in a course."""

    student_id: UUID = Field(..., description="Student UUID")
    course_id: UUID = Field(..., description="Course UUID")


class CompletedContentResponse(BaseModel):
    """A completed content item."""

    content_id: UUID
    completed_at: datetime

    @classmethod
    def from_entity(cls, entity: ContentCompletion) -> "CompletedContentResponse":
        """Create response from entity."""
        return cls(content_id=entity.content_id, completed_at=entity.completed_at)


class EnrollmentResponse(BaseModel):
    """Enrollment response."""

    student_id: UUID
    course_id: UUID
    enrolled_at: datetime
    progress: int = Field(ge=0, le=100, description="0-100 percentage")
    completed_content: list[CompletedContentResponse] = Field(default_factory=list)
    last_completed_at: datetime | None = None

    @classmethod
    def from_entity(cls, entity: Enrollment) -> "EnrollmentResponse":
        """Create response from entity."""
        return cls(
            student_id=entity.student_id,
            course_id=entity.course_id,
            enrolled_at=entity.enrolled_at,
            progress=entity.progress,
            completed_content=[
                CompletedContentResponse.from_entity(c) for c in entity.completions
            ],
            last_completed_at=entity.last_completed_at,
        )


class EnrollmentSummaryResponse(BaseModel):
    """Enrollment as listed for a student."""

    course_id: UUID
    enrolled_at: datetime
    progress: int
    completed_count: int
    last_completed_at: datetime | None = None

    @classmethod
    def from_entity(cls, entity: EnrollmentSummary) -> "EnrollmentSummaryResponse":
        """Create response from entity."""
        return cls(
            course_id=entity.course_id,
            enrolled_at=entity.enrolled_at,
            progress=entity.progress,
            completed_count=entity.completed_count,
            last_completed_at=entity.last_completed_at,
        )


class EnrollmentListResponse(BaseModel):
    """Enrollments of a student."""

    student_id: UUID
    items: list[EnrollmentSummaryResponse]
    total: int


# ==============================================================================
# Completion Schemas
# ==============================================================================


class MarkContentCompleteRequest(BaseModel):
    """Request to mark a content item as completed."""

    content_id: UUID = Field(..., description="Content item UUID")


class CompletionResponse(BaseModel):
    """Result of marking content complete."""

    message: str
    progress: int
    completed_content: list[CompletedContentResponse]
    was_new_completion: bool
    certificate_status: CertificateStatus
    certificate: CertificateResponse | None = None

    @classmethod
    def from_outcome(cls, outcome: CompletionOutcome) -> "CompletionResponse":
        """Create response from a workflow outcome."""
        enrollment = outcome.enrollment
        return cls(
            message=(
                "Content marked as completed"
                if outcome.was_new
                else "Content already completed"
            ),
            progress=enrollment.progress,
            completed_content=[
                CompletedContentResponse.from_entity(c) for c in enrollment.completions
            ],
            was_new_completion=outcome.was_new,
            certificate_status=outcome.certificate_status,
            certificate=(
                CertificateResponse.from_entity(outcome.certificate)
                if outcome.certificate
                else None
            ),
        )


# ==============================================================================
# Progress Schemas
# ==============================================================================


class CourseProgressResponse(BaseModel):
    """Progress of an enrollment against the current catalog."""

    student_id: UUID
    course_id: UUID
    progress: int = Field(ge=0, le=100)
    completed_content: list[CompletedContentResponse]
    completed_items: int
    total_items: int
    enrolled_at: datetime
    last_completed_at: datetime | None = None

    @classmethod
    def from_entity(cls, entity: CourseProgress) -> "CourseProgressResponse":
        """Create response from entity."""
        enrollment = entity.enrollment
        return cls(
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            progress=entity.progress,
            completed_content=[
                CompletedContentResponse.from_entity(c) for c in enrollment.completions
            ],
            completed_items=len(enrollment.completed_content),
            total_items=entity.total_items,
            enrolled_at=enrollment.enrolled_at,
            last_completed_at=enrollment.last_completed_at,
        )
