"""Database models for the course content catalog.

Cassandra table definitions for:
- Courses: course metadata
- Course content: ordered content items per course (progress denominator)
- Content items: lookup by content_id with a foreign key back to the course

Content items are standalone rows keyed by a stable content_id rather than
subdocuments nested inside the course row.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from src.core.timeutils import ensure_utc_aware


class ContentType(str, Enum):
    """Content item type."""

    VIDEO = "video"
    PDF = "pdf"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COURSES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    course_id UUID PRIMARY KEY,
    title TEXT,
    description TEXT,
    instructor_name TEXT,
    created_at TIMESTAMP
)
"""

# Ordered catalog of a course; COUNT(*) on the partition is the denominator
COURSE_CONTENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.course_content (
    course_id UUID,
    position INT,
    content_id UUID,
    title TEXT,
    content_type TEXT,
    url TEXT,
    duration_seconds INT,
    PRIMARY KEY (course_id, position, content_id)
) WITH CLUSTERING ORDER BY (position ASC, content_id ASC)
"""

CONTENT_ITEMS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.content_items (
    content_id UUID PRIMARY KEY,
    course_id UUID,
    position INT,
    title TEXT,
    content_type TEXT,
    url TEXT,
    duration_seconds INT
)
"""

COURSES_TABLES_CQL = [
    COURSES_TABLE_CQL,
    COURSE_CONTENT_TABLE_CQL,
    CONTENT_ITEMS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Course:
    """Course entity."""

    def __init__(
        self,
        title: str,
        description: str = "",
        instructor_name: str | None = None,
        course_id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        self.course_id = course_id or uuid4()
        self.title = title
        self.description = description
        self.instructor_name = instructor_name
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        """Create Course instance from Cassandra row."""
        return cls(
            course_id=row.course_id,
            title=row.title,
            description=row.description or "",
            instructor_name=row.instructor_name,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<Course {self.course_id} {self.title!r}>"


class ContentItem:
    """Addressable unit of course material counted toward completion.

    Attributes:
        content_id: Stable content UUID
        course_id: Owning course UUID
        position: Order inside the course (0-based)
        title: Display title
        content_type: video or pdf
        url: Media URL
        duration_seconds: Media length, if known
    """

    def __init__(
        self,
        course_id: UUID,
        title: str,
        position: int = 0,
        content_type: str = ContentType.VIDEO.value,
        url: str | None = None,
        duration_seconds: int | None = None,
        content_id: UUID | None = None,
    ):
        self.content_id = content_id or uuid4()
        self.course_id = course_id
        self.position = position
        self.title = title
        self.content_type = content_type
        self.url = url
        self.duration_seconds = duration_seconds

    @classmethod
    def from_row(cls, row: Any) -> "ContentItem":
        """Create ContentItem instance from Cassandra row."""
        return cls(
            content_id=row.content_id,
            course_id=row.course_id,
            position=row.position or 0,
            title=row.title,
            content_type=row.content_type or ContentType.VIDEO.value,
            url=row.url,
            duration_seconds=row.duration_seconds,
        )

    def __repr__(self) -> str:
        return (
            f"<ContentItem {self.content_id} course={self.course_id} "
            f"#{self.position}>"
        )
