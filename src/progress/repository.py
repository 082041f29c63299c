"""Enrollment persistence.

The ``enrollments`` row is the single source of truth for a (student, course)
pair. Creation is an ``INSERT ... IF NOT EXISTS`` and every later write is a
compare-and-set on ``version``; callers retry on a lost race.
"""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from .models import Enrollment, EnrollmentSummary


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def lookup_write_timestamp(enrollment: Enrollment) -> int:
    """Write timestamp (microseconds) for the per-student lookup row.

    Anchored on ``enrolled_at`` and increasing with ``version``, so a delayed
    write of an older version never overwrites a newer one. ``enrolled_at`` is
    truncated to milliseconds, the precision Cassandra stores it with.
    """
    enrolled_ms = (enrollment.enrolled_at - _EPOCH) // timedelta(milliseconds=1)
    return enrolled_ms * 1000 + enrollment.version


class EnrollmentRepository:
    """Cassandra access for enrollments."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_enrollment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments
            WHERE student_id = ? AND course_id = ?
        """)

        self._insert_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments
            (student_id, course_id, enrolled_at, completed_content, progress,
             last_completed_at, version)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

        self._update_enrollment = self.session.prepare(f"""
            UPDATE {self.keyspace}.enrollments
            SET completed_content = ?, progress = ?, last_completed_at = ?,
                version = ?
            WHERE student_id = ? AND course_id = ?
            IF version = ?
        """)

        # Lookup table
        self._get_student_enrollments = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.enrollments_by_student
            WHERE student_id = ?
        """)

        self._upsert_student_enrollment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.enrollments_by_student
            (student_id, course_id, enrolled_at, progress, completed_count,
             last_completed_at)
            VALUES (?, ?, ?, ?, ?, ?)
            USING TIMESTAMP ?
        """)

    async def find(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        """Get enrollment for a (student, course) pair, or None."""
        result = await self.session.aexecute(
            self._get_enrollment, [student_id, course_id]
        )
        row = result.one()
        return Enrollment.from_row(row) if row else None

    async def insert_if_absent(self, enrollment: Enrollment) -> bool:
        """Create the enrollment row unless one already exists.

        Returns:
            True if this call created the row
        """
        result = await self.session.aexecute(
            self._insert_enrollment,
            [
                enrollment.student_id,
                enrollment.course_id,
                enrollment.enrolled_at,
                enrollment.completed_content,
                enrollment.progress,
                enrollment.last_completed_at,
                enrollment.version,
            ],
        )
        if not result.was_applied:
            return False

        await self._upsert_lookup(enrollment)
        return True

    async def compare_and_set(
        self, enrollment: Enrollment, expected_version: int
    ) -> bool:
        """Write ``enrollment`` only if the stored version is still ``expected_version``.

        Returns:
            True if the write was applied, False if another writer got there first
        """
        result = await self.session.aexecute(
            self._update_enrollment,
            [
                enrollment.completed_content,
                enrollment.progress,
                enrollment.last_completed_at,
                enrollment.version,
                enrollment.student_id,
                enrollment.course_id,
                expected_version,
            ],
        )
        if not result.was_applied:
            logger.debug(
                "enrollment_version_conflict",
                student_id=str(enrollment.student_id),
                course_id=str(enrollment.course_id),
                expected_version=expected_version,
            )
            return False

        await self._upsert_lookup(enrollment)
        return True

    async def list_by_student(self, student_id: UUID) -> list[EnrollmentSummary]:
        """List all enrollments of a student."""
        rows = await self.session.aexecute(self._get_student_enrollments, [student_id])
        return [EnrollmentSummary.from_row(row) for row in rows]

    async def _upsert_lookup(self, enrollment: Enrollment) -> None:
        await self.session.aexecute(
            self._upsert_student_enrollment,
            [
                enrollment.student_id,
                enrollment.course_id,
                enrollment.enrolled_at,
                enrollment.progress,
                len(enrollment.completed_content),
                enrollment.last_completed_at,
                lookup_write_timestamp(enrollment),
            ],
        )
