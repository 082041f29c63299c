"""Course content catalog service.

The catalog is the authoritative list of content items of a course. Its size
is the denominator of every progress computation.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from cassandra import DriverException, RequestExecutionException

from src.core.exceptions import (
    CatalogUnavailableError,
    ContentNotFoundError,
    ContentNotInCourseError,
    CourseNotFoundError,
)

from .models import ContentItem, Course


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from .schemas import CreateContentItemRequest, CreateCourseRequest

logger = structlog.get_logger(__name__)


class CourseCatalogService:
    """Service for courses and their content items."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._get_course = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.courses WHERE course_id = ?"
        )
        self._insert_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses
            (course_id, title, description, instructor_name, created_at)
            VALUES (?, ?, ?, ?, ?)
        """)

        self._get_course_content = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.course_content WHERE course_id = ?"
        )
        self._count_course_content = self.session.prepare(
            f"SELECT COUNT(*) FROM {self.keyspace}.course_content WHERE course_id = ?"
        )
        self._insert_course_content = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.course_content
            (course_id, position, content_id, title, content_type, url,
             duration_seconds)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_content_item = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.content_items WHERE content_id = ?"
        )
        self._insert_content_item = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.content_items
            (content_id, course_id, position, title, content_type, url,
             duration_seconds)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

    # ==========================================================================
    # Courses
    # ==========================================================================

    async def create_course(self, data: "CreateCourseRequest") -> Course:
        """Create a course with an empty catalog."""
        course = Course(
            title=data.title,
            description=data.description,
            instructor_name=data.instructor_name,
        )
        await self.session.aexecute(
            self._insert_course,
            [
                course.course_id,
                course.title,
                course.description,
                course.instructor_name,
                course.created_at,
            ],
        )
        logger.info("course_created", course_id=str(course.course_id))
        return course

    async def find_course(self, course_id: UUID) -> Course | None:
        """Get course by ID, or None."""
        result = await self.session.aexecute(self._get_course, [course_id])
        row = result.one()
        return Course.from_row(row) if row else None

    async def get_course(self, course_id: UUID) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If the course does not exist
        """
        course = await self.find_course(course_id)
        if course is None:
            raise CourseNotFoundError
        return course

    # ==========================================================================
    # Content Items
    # ==========================================================================

    async def add_content_item(
        self, course_id: UUID, data: "CreateContentItemRequest"
    ) -> ContentItem:
        """Append a content item at the end of the course catalog."""
        position = await self.get_content_count(course_id)

        item = ContentItem(
            course_id=course_id,
            title=data.title,
            position=position,
            content_type=data.content_type.value,
            url=data.url,
            duration_seconds=data.duration_seconds,
        )
        details = [item.title, item.content_type, item.url, item.duration_seconds]

        # Dual write: ordered catalog + lookup by content_id
        await self.session.aexecute(
            self._insert_course_content,
            [item.course_id, item.position, item.content_id, *details],
        )
        await self.session.aexecute(
            self._insert_content_item,
            [item.content_id, item.course_id, item.position, *details],
        )

        logger.info(
            "content_item_added",
            course_id=str(course_id),
            content_id=str(item.content_id),
            position=item.position,
        )
        return item

    async def list_content(self, course_id: UUID) -> list[ContentItem]:
        """List the content items of a course in catalog order."""
        await self.get_course(course_id)
        rows = await self.session.aexecute(self._get_course_content, [course_id])
        return [ContentItem.from_row(row) for row in rows]

    async def get_content_count(self, course_id: UUID) -> int:
        """Number of content items in the course catalog.

        Raises:
            CourseNotFoundError: If the course does not exist
            CatalogUnavailableError: If the catalog cannot be read
        """
        try:
            await self.get_course(course_id)
            result = await self.session.aexecute(
                self._count_course_content, [course_id]
            )
        except (DriverException, RequestExecutionException) as e:
            logger.error(
                "catalog_read_failed", course_id=str(course_id), error=str(e)
            )
            raise CatalogUnavailableError from e

        row = result.one()
        return int(row.count) if row else 0

    async def get_content_item(self, content_id: UUID) -> ContentItem | None:
        """Get content item by ID, or None."""
        result = await self.session.aexecute(self._get_content_item, [content_id])
        row = result.one()
        return ContentItem.from_row(row) if row else None

    async def ensure_content_in_course(
        self, course_id: UUID, content_id: UUID
    ) -> ContentItem:
        """Resolve a content reference against its course.

        Raises:
            ContentNotFoundError: If the content item does not exist
            ContentNotInCourseError: If it belongs to another course
        """
        item = await self.get_content_item(content_id)
        if item is None:
            raise ContentNotFoundError
        if item.course_id != course_id:
            raise ContentNotInCourseError
        return item
