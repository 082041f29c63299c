"""Tests for CourseCatalogService against a mocked Cassandra session."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from cassandra import OperationTimedOut
from cassandra.cluster import Session

from src.core.exceptions import (
    CatalogUnavailableError,
    ContentNotFoundError,
    ContentNotInCourseError,
    CourseNotFoundError,
)
from src.courses.schemas import CreateContentItemRequest, CreateCourseRequest
from src.courses.service import CourseCatalogService


@pytest.fixture
def mock_session():
    """Mock Cassandra session; prepared statements are their CQL text."""
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: cql)
    session.aexecute = AsyncMock(return_value=Mock())
    return session


@pytest.fixture
def service(mock_session) -> CourseCatalogService:
    return CourseCatalogService(session=mock_session, keyspace="test_keyspace")


def _one(row):
    result = Mock()
    result.one.return_value = row
    return result


def _course_row(course_id=None):
    return SimpleNamespace(
        course_id=course_id or uuid4(),
        title="Analytical Engines",
        description=None,
        instructor_name="Charles Babbage",
        created_at=datetime(2024, 1, 1),
    )


def _item_row(course_id, position=0):
    return SimpleNamespace(
        content_id=uuid4(),
        course_id=course_id,
        position=position,
        title=f"Lesson {position + 1}",
        content_type="pdf",
        url=None,
        duration_seconds=None,
    )


class TestCourses:
    """Tests for course creation and lookup."""

    @pytest.mark.asyncio
    async def test_create_course(self, service, mock_session):
        """Should insert the course and return it."""
        course = await service.create_course(
            CreateCourseRequest(title="Analytical Engines")
        )

        stmt, values = mock_session.aexecute.call_args.args
        assert "INSERT INTO test_keyspace.courses" in stmt
        assert values[0] == course.course_id
        assert values[1] == "Analytical Engines"

    @pytest.mark.asyncio
    async def test_get_course_missing(self, service, mock_session):
        """Should raise when the course does not exist."""
        mock_session.aexecute.return_value = _one(None)

        with pytest.raises(CourseNotFoundError):
            await service.get_course(uuid4())

    @pytest.mark.asyncio
    async def test_get_course(self, service, mock_session):
        """Should map the row."""
        row = _course_row()
        mock_session.aexecute.return_value = _one(row)

        course = await service.get_course(row.course_id)

        assert course.course_id == row.course_id
        assert course.description == ""


class TestContentCount:
    """Tests for get_content_count."""

    @pytest.mark.asyncio
    async def test_counts_items(self, service, mock_session):
        """Should return the catalog size."""
        row = _course_row()
        mock_session.aexecute.side_effect = [
            _one(row),
            _one(SimpleNamespace(count=7)),
        ]

        assert await service.get_content_count(row.course_id) == 7

    @pytest.mark.asyncio
    async def test_unknown_course(self, service, mock_session):
        """Should raise CourseNotFoundError rather than count zero."""
        mock_session.aexecute.return_value = _one(None)

        with pytest.raises(CourseNotFoundError):
            await service.get_content_count(uuid4())

    @pytest.mark.asyncio
    async def test_driver_failure(self, service, mock_session):
        """Should surface driver errors as an unavailable catalog."""
        mock_session.aexecute.side_effect = OperationTimedOut("timed out")

        with pytest.raises(CatalogUnavailableError) as exc_info:
            await service.get_content_count(uuid4())

        assert exc_info.value.retryable is True


class TestContentItems:
    """Tests for content items."""

    @pytest.mark.asyncio
    async def test_add_content_item_appends(self, service, mock_session):
        """Should place the item after the existing ones and dual write it."""
        row = _course_row()
        mock_session.aexecute.side_effect = [
            _one(row),
            _one(SimpleNamespace(count=2)),
            Mock(),
            Mock(),
        ]

        item = await service.add_content_item(
            row.course_id, CreateContentItemRequest(title="Lesson 3")
        )

        assert item.position == 2
        assert item.content_type == "video"
        statements = [call.args[0] for call in mock_session.aexecute.call_args_list]
        assert "course_content" in statements[2]
        assert "content_items" in statements[3]

    @pytest.mark.asyncio
    async def test_list_content(self, service, mock_session):
        """Should list items in catalog order."""
        course_row = _course_row()
        rows = [_item_row(course_row.course_id, p) for p in range(3)]
        mock_session.aexecute.side_effect = [_one(course_row), rows]

        items = await service.list_content(course_row.course_id)

        assert [i.position for i in items] == [0, 1, 2]
        assert items[0].content_type == "pdf"

    @pytest.mark.asyncio
    async def test_ensure_content_in_course(self, service, mock_session):
        """Should accept content of the same course."""
        course_id = uuid4()
        row = _item_row(course_id)
        mock_session.aexecute.return_value = _one(row)

        item = await service.ensure_content_in_course(course_id, row.content_id)

        assert item.content_id == row.content_id

    @pytest.mark.asyncio
    async def test_content_of_other_course(self, service, mock_session):
        """Should reject content owned by another course."""
        row = _item_row(uuid4())
        mock_session.aexecute.return_value = _one(row)

        with pytest.raises(ContentNotInCourseError):
            await service.ensure_content_in_course(uuid4(), row.content_id)

    @pytest.mark.asyncio
    async def test_unknown_content(self, service, mock_session):
        """Should reject unknown content ids."""
        mock_session.aexecute.return_value = _one(None)

        with pytest.raises(ContentNotFoundError):
            await service.ensure_content_in_course(uuid4(), uuid4())
