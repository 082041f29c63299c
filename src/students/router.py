"""Student directory endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from src.core.exceptions import LMSError, to_http_exception

from .dependencies import StudentServiceDep
from .schemas import CreateStudentRequest, StudentResponse


router = APIRouter(prefix="/v1/students", tags=["students"])


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register student",
)
async def create_student(
    data: CreateStudentRequest,
    student_service: StudentServiceDep,
) -> StudentResponse:
    """Register a student in the directory."""
    student = await student_service.create_student(data.full_name, data.email)
    return StudentResponse.from_entity(student)


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    summary="Get student",
)
async def get_student(
    student_id: UUID,
    student_service: StudentServiceDep,
) -> StudentResponse:
    """Get a student by ID."""
    try:
        student = await student_service.get_student(student_id)
    except LMSError as e:
        raise to_http_exception(e) from e
    return StudentResponse.from_entity(student)
