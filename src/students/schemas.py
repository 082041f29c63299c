"""Pydantic schemas for the student directory."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .models import Student


class CreateStudentRequest(BaseModel):
    """Request to register a student."""

    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr


class StudentResponse(BaseModel):
    """Student response."""

    student_id: UUID
    full_name: str
    email: str
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: Student) -> "StudentResponse":
        """Create response from entity."""
        return cls(
            student_id=entity.student_id,
            full_name=entity.full_name,
            email=entity.email,
            created_at=entity.created_at,
        )
