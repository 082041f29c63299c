"""Database models for enrollment progress tracking.

Cassandra table definitions for:
- Enrollments: one row per (student, course) holding the completed content
  map, the derived progress and a version used for compare-and-set updates
- Lookup table: enrollments by student for listing

All writes to ``enrollments`` are lightweight transactions (IF NOT EXISTS /
IF version = ?), so concurrent completions on one enrollment never lose
updates. ``enrollments_by_student`` is a denormalized copy refreshed after
each successful write.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from src.core.timeutils import ensure_utc_aware

from .tracker import compute_progress


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

ENROLLMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments (
    student_id UUID,
    course_id UUID,
    enrolled_at TIMESTAMP,
    completed_content MAP<UUID, TIMESTAMP>,
    progress INT,
    last_completed_at TIMESTAMP,
    version INT,
    PRIMARY KEY ((student_id, course_id))
)
"""

# Lookup: "which courses is this student enrolled in?"
ENROLLMENTS_BY_STUDENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.enrollments_by_student (
    student_id UUID,
    course_id UUID,
    enrolled_at TIMESTAMP,
    progress INT,
    completed_count INT,
    last_completed_at TIMESTAMP,
    PRIMARY KEY (student_id, course_id)
)
"""

PROGRESS_TABLES_CQL = [
    ENROLLMENTS_TABLE_CQL,
    ENROLLMENTS_BY_STUDENT_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass(frozen=True)
class ContentCompletion:
    """A completed content item."""

    content_id: UUID
    completed_at: datetime


@dataclass(frozen=True)
class EnrollmentSummary:
    """Enrollment as listed from the by-student lookup table."""

    student_id: UUID
    course_id: UUID
    enrolled_at: datetime
    progress: int
    completed_count: int
    last_completed_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Any) -> "EnrollmentSummary":
        """Create EnrollmentSummary from a lookup row."""
        return cls(
            student_id=row.student_id,
            course_id=row.course_id,
            enrolled_at=ensure_utc_aware(row.enrolled_at),
            progress=row.progress or 0,
            completed_count=row.completed_count or 0,
            last_completed_at=ensure_utc_aware(row.last_completed_at),
        )


class Enrollment:
    """Course enrollment entity.

    Attributes:
        student_id: Student UUID
        course_id: Course UUID
        enrolled_at: Enrollment timestamp
        completed_content: content_id -> completion timestamp, unique by id
        progress: Derived percentage (0-100), never set from client input
        last_completed_at: Timestamp of the latest new completion
        version: Incremented by every successful write (compare-and-set)
    """

    def __init__(
        self,
        student_id: UUID,
        course_id: UUID,
        enrolled_at: datetime | None = None,
        completed_content: dict[UUID, datetime] | None = None,
        progress: int = 0,
        last_completed_at: datetime | None = None,
        version: int = 0,
    ):
        self.student_id = student_id
        self.course_id = course_id
        self.enrolled_at = ensure_utc_aware(enrolled_at) or datetime.now(UTC)
        self.completed_content = {
            content_id: ensure_utc_aware(completed_at)
            for content_id, completed_at in (completed_content or {}).items()
        }
        self.progress = progress
        self.last_completed_at = ensure_utc_aware(last_completed_at)
        self.version = version

    @property
    def is_completed(self) -> bool:
        """Check if every catalog item has been completed."""
        return self.progress == 100

    @property
    def completions(self) -> list[ContentCompletion]:
        """Completed items in completion order."""
        return sorted(
            (
                ContentCompletion(content_id=content_id, completed_at=completed_at)
                for content_id, completed_at in self.completed_content.items()
            ),
            key=lambda c: (c.completed_at, str(c.content_id)),
        )

    def has_completed(self, content_id: UUID) -> bool:
        """Check if a content item is already marked complete."""
        return content_id in self.completed_content

    def with_completion(
        self,
        content_id: UUID,
        completed_at: datetime,
        course_content_count: int,
    ) -> "Enrollment":
        """Next version of this enrollment with one more completed item.

        Progress is recomputed from the full completed set against the live
        catalog size.
        """
        completed = {**self.completed_content, content_id: completed_at}
        return Enrollment(
            student_id=self.student_id,
            course_id=self.course_id,
            enrolled_at=self.enrolled_at,
            completed_content=completed,
            progress=compute_progress(course_content_count, completed.keys()),
            last_completed_at=completed_at,
            version=self.version + 1,
        )

    @classmethod
    def from_row(cls, row: Any) -> "Enrollment":
        """Create Enrollment instance from Cassandra row."""
        return cls(
            student_id=row.student_id,
            course_id=row.course_id,
            enrolled_at=row.enrolled_at,
            completed_content=dict(row.completed_content or {}),
            progress=row.progress or 0,
            last_completed_at=row.last_completed_at,
            version=row.version or 0,
        )

    def __repr__(self) -> str:
        return (
            f"<Enrollment student={self.student_id} course={self.course_id} "
            f"{self.progress}% v{self.version}>"
        )


@dataclass(frozen=True)
class CourseProgress:
    """Progress of an enrollment recomputed against the live catalog."""

    enrollment: Enrollment
    progress: int
    total_items: int

    @property
    def is_completed(self) -> bool:
        """Check if the course is fully completed."""
        return self.progress == 100
