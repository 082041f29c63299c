"""Pydantic schemas for the course content catalog."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import ContentItem, ContentType, Course


class CreateCourseRequest(BaseModel):
    """Request to create a course."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    instructor_name: str | None = Field(default=None, max_length=200)


class CourseResponse(BaseModel):
    """Course response."""

    course_id: UUID
    title: str
    description: str
    instructor_name: str | None = None
    created_at: datetime
    content_count: int = 0

    @classmethod
    def from_entity(cls, entity: Course, content_count: int = 0) -> "CourseResponse":
        """Create response from entity."""
        return cls(
            course_id=entity.course_id,
            title=entity.title,
            description=entity.description,
            instructor_name=entity.instructor_name,
            created_at=entity.created_at,
            content_count=content_count,
        )


class CreateContentItemRequest(BaseModel):
    """Request to append a content item to a course."""

    title: str = Field(..., min_length=1, max_length=200)
    content_type: ContentType = ContentType.VIDEO
    url: str | None = Field(default=None, max_length=2000)
    duration_seconds: int | None = Field(default=None, ge=0)


class ContentItemResponse(BaseModel):
    """Content item response."""

    content_id: UUID
    course_id: UUID
    position: int
    title: str
    content_type: ContentType
    url: str | None = None
    duration_seconds: int | None = None

    @classmethod
    def from_entity(cls, entity: ContentItem) -> "ContentItemResponse":
        """Create response from entity."""
        return cls(
            content_id=entity.content_id,
            course_id=entity.course_id,
            position=entity.position,
            title=entity.title,
            content_type=ContentType(entity.content_type),
            url=entity.url,
            duration_seconds=entity.duration_seconds,
        )


class ContentListResponse(BaseModel):
    """Ordered content items of a course."""

    items: list[ContentItemResponse]
    total: int
