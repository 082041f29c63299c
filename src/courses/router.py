"""Course catalog endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from src.core.exceptions import LMSError, to_http_exception

from .dependencies import CatalogServiceDep
from .schemas import (
    ContentItemResponse,
    ContentListResponse,
    CourseResponse,
    CreateContentItemRequest,
    CreateCourseRequest,
)


router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CreateCourseRequest,
    catalog_service: CatalogServiceDep,
) -> CourseResponse:
    """Create a course with an empty content catalog."""
    course = await catalog_service.create_course(data)
    return CourseResponse.from_entity(course)


@router.get(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Get course",
)
async def get_course(
    course_id: UUID,
    catalog_service: CatalogServiceDep,
) -> CourseResponse:
    """Get a course with its content count."""
    try:
        course = await catalog_service.get_course(course_id)
        count = await catalog_service.get_content_count(course_id)
    except LMSError as e:
        raise to_http_exception(e) from e
    return CourseResponse.from_entity(course, content_count=count)


@router.post(
    "/{course_id}/content",
    response_model=ContentItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add content item",
)
async def add_content_item(
    course_id: UUID,
    data: CreateContentItemRequest,
    catalog_service: CatalogServiceDep,
) -> ContentItemResponse:
    """Append a video or document to the course catalog."""
    try:
        item = await catalog_service.add_content_item(course_id, data)
    except LMSError as e:
        raise to_http_exception(e) from e
    return ContentItemResponse.from_entity(item)


@router.get(
    "/{course_id}/content",
    response_model=ContentListResponse,
    summary="List content items",
)
async def list_content(
    course_id: UUID,
    catalog_service: CatalogServiceDep,
) -> ContentListResponse:
    """List the content items of a course in order."""
    try:
        items = await catalog_service.list_content(course_id)
    except LMSError as e:
        raise to_http_exception(e) from e
    return ContentListResponse(
        items=[ContentItemResponse.from_entity(item) for item in items],
        total=len(items),
    )
