"""Pydantic schemas for certificates."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import Certificate


class IssueCertificateRequest(BaseModel):
    """Request to issue (or fetch) the certificate of an enrollment."""

    student_id: UUID = Field(..., description="Student UUID")
    course_id: UUID = Field(..., description="Course UUID")


class CertificateResponse(BaseModel):
    """Certificate response."""

    certificate_id: str
    student_id: UUID
    course_id: UUID
    student_name: str
    course_title: str
    file_url: str | None = None
    issued_at: datetime

    @classmethod
    def from_entity(cls, entity: Certificate) -> "CertificateResponse":
        """Create response from entity."""
        return cls(
            certificate_id=entity.certificate_id,
            student_id=entity.student_id,
            course_id=entity.course_id,
            student_name=entity.student_name,
            course_title=entity.course_title,
            file_url=entity.file_url,
            issued_at=entity.issued_at,
        )


class CertificateListResponse(BaseModel):
    """Certificates of a student."""

    items: list[CertificateResponse]
    total: int


class VerifyCertificateResponse(BaseModel):
    """Public verification result; only ``valid`` is set for unknown ids."""

    valid: bool
    certificate_id: str | None = None
    student_name: str | None = None
    course_title: str | None = None
    issued_at: datetime | None = None
    file_url: str | None = None
