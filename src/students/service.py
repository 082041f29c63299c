"""Student directory service."""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.core.exceptions import StudentNotFoundError

from .models import Student


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class StudentService:
    """Create and look up students."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements."""
        self._get_student = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.students WHERE student_id = ?"
        )
        self._insert_student = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.students
            (student_id, full_name, email, created_at)
            VALUES (?, ?, ?, ?)
        """)

    async def create_student(self, full_name: str, email: str) -> Student:
        """Register a student."""
        student = Student(full_name=full_name.strip(), email=email.strip().lower())
        await self.session.aexecute(
            self._insert_student,
            [student.student_id, student.full_name, student.email, student.created_at],
        )
        logger.info("student_created", student_id=str(student.student_id))
        return student

    async def find_student(self, student_id: UUID) -> Student | None:
        """Get student by ID, or None."""
        result = await self.session.aexecute(self._get_student, [student_id])
        row = result.one()
        return Student.from_row(row) if row else None

    async def get_student(self, student_id: UUID) -> Student:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If the student does not exist
        """
        student = await self.find_student(student_id)
        if student is None:
            raise StudentNotFoundError
        return student
