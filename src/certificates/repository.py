"""Certificate persistence."""

from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog
from cassandra import DriverException, RequestExecutionException

from src.core.exceptions import CertificateStoreUnavailableError

from .models import Certificate


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)

_COLUMNS = (
    "student_id, course_id, certificate_id, student_name, course_title, "
    "file_url, issued_at"
)


class CertificateRepository:
    """Cassandra access for certificates."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_by_pair = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.certificates
            WHERE student_id = ? AND course_id = ?
        """)
        self._get_by_id = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.certificates_by_id WHERE certificate_id = ?"
        )
        self._get_by_student = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.certificates_by_student WHERE student_id = ?"
        )

        self._insert_certificate = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.certificates ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)
        self._insert_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.certificates_by_id ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)
        self._insert_by_student = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.certificates_by_student ({_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

    async def _execute(self, statement, values: list[Any]) -> Any:
        try:
            return await self.session.aexecute(statement, values)
        except (DriverException, RequestExecutionException) as e:
            logger.error("certificate_store_failed", error=str(e))
            raise CertificateStoreUnavailableError from e

    async def find_by_pair(
        self, student_id: UUID, course_id: UUID
    ) -> Certificate | None:
        """Get the certificate of a (student, course) pair, or None."""
        result = await self._execute(self._get_by_pair, [student_id, course_id])
        row = result.one()
        return Certificate.from_row(row) if row else None

    async def find_by_id(self, certificate_id: str) -> Certificate | None:
        """Get certificate by its public token, or None."""
        result = await self._execute(self._get_by_id, [certificate_id])
        row = result.one()
        return Certificate.from_row(row) if row else None

    async def list_by_student(self, student_id: UUID) -> list[Certificate]:
        """List all certificates of a student."""
        rows = await self._execute(self._get_by_student, [student_id])
        return [Certificate.from_row(row) for row in rows]

    async def create_if_absent(self, certificate: Certificate) -> bool:
        """Insert the certificate unless the pair already has one.

        Lookup rows are written only by the winner, so they never point at a
        certificate that lost the race. If they fail after the insert was
        applied, ``ensure_lookups`` on a later call restores them.

        Returns:
            True if this call created the certificate

        Raises:
            CertificateStoreUnavailableError: If Cassandra could not be reached
        """
        result = await self._execute(self._insert_certificate, certificate.to_row())
        if not result.was_applied:
            return False

        await self.ensure_lookups(certificate)
        return True

    async def ensure_lookups(self, certificate: Certificate) -> None:
        """Upsert the by-id and by-student rows of an issued certificate.

        Idempotent; the rows carry the same values as the pair row.
        """
        values = certificate.to_row()
        await self._execute(self._insert_by_id, values)
        await self._execute(self._insert_by_student, values)
