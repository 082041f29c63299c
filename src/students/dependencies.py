"""FastAPI dependencies for the student directory."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import StudentService


async def get_student_service(request: Request) -> StudentService:
    """Get student service from app state."""
    service = getattr(request.app.state, "student_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Student service not available",
        )
    return service


StudentServiceDep = Annotated[StudentService, Depends(get_student_service)]
