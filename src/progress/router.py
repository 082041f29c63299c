"""Enrollment progress API endpoints.

Provides routes for:
- Course enrollment
- Content completion (the only way progress changes)
- Progress queries
"""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, status

from src.core.context import set_student_id
from src.core.exceptions import LMSError, to_http_exception

from .dependencies import CompletionWorkflowDep, ProgressServiceDep
from .schemas import (
    CompletionResponse,
    CourseProgressResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollmentSummaryResponse,
    EnrollRequest,
    MarkContentCompleteRequest,
)


router = APIRouter(prefix="/v1/enrollments", tags=["enrollments"])


@router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in course",
)
async def enroll(
    data: EnrollRequest,
    progress_service: ProgressServiceDep,
) -> EnrollmentResponse:
    """Enroll a student in a course.

    Fails with 409 if the student is already enrolled.
    """
    set_student_id(data.student_id)
    try:
        enrollment = await progress_service.enroll(data.student_id, data.course_id)
    except LMSError as e:
        raise to_http_exception(e) from e
    return EnrollmentResponse.from_entity(enrollment)


@router.get(
    "/{student_id}",
    response_model=EnrollmentListResponse,
    summary="List student enrollments",
)
async def list_enrollments(
    student_id: UUID,
    progress_service: ProgressServiceDep,
) -> EnrollmentListResponse:
    """List the courses a student is enrolled in, with progress."""
    set_student_id(student_id)
    enrollments = await progress_service.list_student_enrollments(student_id)
    return EnrollmentListResponse(
        student_id=student_id,
        items=[EnrollmentSummaryResponse.from_entity(e) for e in enrollments],
        total=len(enrollments),
    )


@router.post(
    "/{student_id}/{course_id}/complete",
    response_model=CompletionResponse,
    summary="Mark content complete",
    description=(
        "Mark a content item as completed. Idempotent; reaching 100% "
        "triggers certificate issuance."
    ),
)
async def mark_content_complete(
    student_id: UUID,
    course_id: UUID,
    data: MarkContentCompleteRequest,
    workflow: CompletionWorkflowDep,
    background_tasks: BackgroundTasks,
) -> CompletionResponse:
    """Mark content as complete and report certificate state."""
    set_student_id(student_id)
    try:
        outcome = await workflow.complete_content(
            student_id,
            course_id,
            data.content_id,
            schedule=background_tasks.add_task,
        )
    except LMSError as e:
        raise to_http_exception(e) from e
    return CompletionResponse.from_outcome(outcome)


@router.get(
    "/{student_id}/{course_id}/progress",
    response_model=CourseProgressResponse,
    summary="Get course progress",
)
async def get_progress(
    student_id: UUID,
    course_id: UUID,
    progress_service: ProgressServiceDep,
) -> CourseProgressResponse:
    """Get progress recomputed against the current catalog."""
    set_student_id(student_id)
    try:
        course_progress = await progress_service.get_course_progress(
            student_id, course_id
        )
    except LMSError as e:
        raise to_http_exception(e) from e
    return CourseProgressResponse.from_entity(course_progress)
