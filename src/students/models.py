"""Database models for the student directory.

Students are only read by this service to print and verify certificates;
account management (passwords, roles, sessions) lives elsewhere.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from src.core.timeutils import ensure_utc_aware


STUDENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.students (
    student_id UUID PRIMARY KEY,
    full_name TEXT,
    email TEXT,
    created_at TIMESTAMP
)
"""

STUDENTS_TABLES_CQL = [STUDENTS_TABLE_CQL]


class Student:
    """Student entity."""

    def __init__(
        self,
        full_name: str,
        email: str,
        student_id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        self.student_id = student_id or uuid4()
        self.full_name = full_name
        self.email = email
        self.created_at = ensure_utc_aware(created_at) or datetime.now(UTC)

    @classmethod
    def from_row(cls, row: Any) -> "Student":
        """Create Student instance from Cassandra row."""
        return cls(
            student_id=row.student_id,
            full_name=row.full_name,
            email=row.email,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<Student {self.student_id} {self.full_name}>"
