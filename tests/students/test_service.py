"""Tests for StudentService against a mocked Cassandra session."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from cassandra.cluster import Session

from src.core.exceptions import StudentNotFoundError
from src.students.service import StudentService


@pytest.fixture
def mock_session():
    """Mock Cassandra session."""
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: cql)
    session.aexecute = AsyncMock(return_value=Mock())
    return session


@pytest.fixture
def service(mock_session) -> StudentService:
    return StudentService(session=mock_session, keyspace="test_keyspace")


class TestStudentService:
    """Tests for StudentService."""

    @pytest.mark.asyncio
    async def test_create_student_normalizes(self, service, mock_session):
        """Should trim the name and lowercase the email."""
        student = await service.create_student("  Ada Lovelace ", " Ada@Example.COM")

        assert student.full_name == "Ada Lovelace"
        assert student.email == "ada@example.com"
        _, values = mock_session.aexecute.call_args.args
        assert values[:3] == [student.student_id, "Ada Lovelace", "ada@example.com"]

    @pytest.mark.asyncio
    async def test_get_student(self, service, mock_session):
        """Should map the row."""
        row = SimpleNamespace(
            student_id=uuid4(),
            full_name="Ada Lovelace",
            email="ada@example.com",
            created_at=datetime(2024, 1, 1),
        )
        result = Mock()
        result.one.return_value = row
        mock_session.aexecute.return_value = result

        student = await service.get_student(row.student_id)

        assert student.student_id == row.student_id
        assert student.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_student_missing(self, service, mock_session):
        """Should raise when the student does not exist."""
        result = Mock()
        result.one.return_value = None
        mock_session.aexecute.return_value = result

        with pytest.raises(StudentNotFoundError):
            await service.get_student(uuid4())
