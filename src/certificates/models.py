"""Database models for certificates.

Cassandra table definitions for:
- Certificates: one partition per (student, course); ``INSERT ... IF NOT EXISTS``
  on it is what guarantees at most one certificate per enrollment
- Lookup by certificate_id (verification, download)
- Lookup by student (listing)
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from src.core.timeutils import ensure_utc_aware


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

CERTIFICATES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.certificates (
    student_id UUID,
    course_id UUID,
    certificate_id TEXT,
    student_name TEXT,
    course_title TEXT,
    file_url TEXT,
    issued_at TIMESTAMP,
    PRIMARY KEY ((student_id, course_id))
)
"""

CERTIFICATES_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.certificates_by_id (
    certificate_id TEXT PRIMARY KEY,
    student_id UUID,
    course_id UUID,
    student_name TEXT,
    course_title TEXT,
    file_url TEXT,
    issued_at TIMESTAMP
)
"""

CERTIFICATES_BY_STUDENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.certificates_by_student (
    student_id UUID,
    course_id UUID,
    certificate_id TEXT,
    student_name TEXT,
    course_title TEXT,
    file_url TEXT,
    issued_at TIMESTAMP,
    PRIMARY KEY (student_id, course_id)
)
"""

CERTIFICATES_TABLES_CQL = [
    CERTIFICATES_TABLE_CQL,
    CERTIFICATES_BY_ID_TABLE_CQL,
    CERTIFICATES_BY_STUDENT_TABLE_CQL,
]


def generate_certificate_id() -> str:
    """Generate an opaque certificate token."""
    return str(uuid4())


# ==============================================================================
# Entity Classes
# ==============================================================================


class Certificate:
    """Proof of completion, issued at most once per (student, course).

    Attributes:
        certificate_id: Opaque public token
        student_id: Student UUID
        course_id: Course UUID
        student_name: Name printed on the artifact
        course_title: Course title printed on the artifact
        file_url: URL of the stored PDF
        issued_at: Issue timestamp
    """

    def __init__(
        self,
        student_id: UUID,
        course_id: UUID,
        student_name: str,
        course_title: str,
        file_url: str | None = None,
        certificate_id: str | None = None,
        issued_at: datetime | None = None,
    ):
        self.certificate_id = certificate_id or generate_certificate_id()
        self.student_id = student_id
        self.course_id = course_id
        self.student_name = student_name
        self.course_title = course_title
        self.file_url = file_url
        self.issued_at = ensure_utc_aware(issued_at) or datetime.now(UTC)

    def to_row(self) -> list[Any]:
        """Column values in the order shared by all certificate tables."""
        return [
            self.student_id,
            self.course_id,
            self.certificate_id,
            self.student_name,
            self.course_title,
            self.file_url,
            self.issued_at,
        ]

    @classmethod
    def from_row(cls, row: Any) -> "Certificate":
        """Create Certificate instance from Cassandra row."""
        return cls(
            certificate_id=row.certificate_id,
            student_id=row.student_id,
            course_id=row.course_id,
            student_name=row.student_name or "",
            course_title=row.course_title or "",
            file_url=row.file_url,
            issued_at=row.issued_at,
        )

    def __repr__(self) -> str:
        return (
            f"<Certificate {self.certificate_id} student={self.student_id} "
            f"course={self.course_id}>"
        )
