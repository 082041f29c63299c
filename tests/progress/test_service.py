"""Tests for enrollment and content completion.

Covers:
- enroll (uniqueness, unknown course/student)
- mark_content_complete / record_completion (idempotence, validation)
- concurrent completions on one enrollment
- get_course_progress
"""

import asyncio
from uuid import uuid4

import pytest
import pytest_asyncio

from src.core.exceptions import (
    AlreadyEnrolledError,
    ConcurrentUpdateError,
    ContentNotFoundError,
    ContentNotInCourseError,
    CourseNotFoundError,
    EnrollmentNotFoundError,
    StudentNotFoundError,
)
from src.progress.service import ProgressService


class TestEnroll:
    """Tests for enroll."""

    @pytest.mark.asyncio
    async def test_enroll_creates_enrollment(
        self, progress_service: ProgressService, student, course
    ):
        """Should create an empty enrollment."""
        enrollment = await progress_service.enroll(student.student_id, course.course_id)

        assert enrollment.student_id == student.student_id
        assert enrollment.course_id == course.course_id
        assert enrollment.progress == 0
        assert enrollment.completed_content == {}
        assert enrollment.version == 0

    @pytest.mark.asyncio
    async def test_enroll_twice_fails(
        self,
        progress_service: ProgressService,
        enrollment_repository,
        student,
        course,
    ):
        """Should reject a second enrollment without creating a duplicate."""
        await progress_service.enroll(student.student_id, course.course_id)

        with pytest.raises(AlreadyEnrolledError) as exc_info:
            await progress_service.enroll(student.student_id, course.course_id)

        assert exc_info.value.code == "already_enrolled"
        assert len(enrollment_repository.rows) == 1

    @pytest.mark.asyncio
    async def test_enroll_unknown_course(self, progress_service: ProgressService, student):
        """Should fail for a course that does not exist."""
        with pytest.raises(CourseNotFoundError):
            await progress_service.enroll(student.student_id, uuid4())

    @pytest.mark.asyncio
    async def test_enroll_unknown_student(self, progress_service: ProgressService, course):
        """Should fail for a student that does not exist."""
        with pytest.raises(StudentNotFoundError):
            await progress_service.enroll(uuid4(), course.course_id)

    @pytest.mark.asyncio
    async def test_concurrent_enrollments_create_one(
        self, progress_service: ProgressService, enrollment_repository, student, course
    ):
        """Should let exactly one of two simultaneous enrollments succeed."""
        results = await asyncio.gather(
            progress_service.enroll(student.student_id, course.course_id),
            progress_service.enroll(student.student_id, course.course_id),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, AlreadyEnrolledError)]
        assert len(errors) == 1
        assert len(enrollment_repository.rows) == 1


class TestGetEnrollment:
    """Tests for get_enrollment."""

    @pytest.mark.asyncio
    async def test_not_enrolled(
        self, progress_service: ProgressService, enrollment_repository, student, course
    ):
        """Should fail and never auto-create on read."""
        with pytest.raises(EnrollmentNotFoundError) as exc_info:
            await progress_service.get_enrollment(student.student_id, course.course_id)

        assert exc_info.value.code == "not_enrolled"
        assert enrollment_repository.rows == {}


class TestMarkContentComplete:
    """Tests for mark_content_complete and record_completion."""

    @pytest_asyncio.fixture
    async def enrolled(self, progress_service: ProgressService, student, course):
        return await progress_service.enroll(student.student_id, course.course_id)

    @pytest.mark.asyncio
    async def test_first_completion(
        self, progress_service: ProgressService, catalog, student, course, enrolled
    ):
        """Should add the item and recompute progress."""
        content_id = catalog.content_ids(course.course_id)[0]

        enrollment, was_new = await progress_service.mark_content_complete(
            student.student_id, course.course_id, content_id
        )

        assert was_new is True
        assert enrollment.progress == 25
        assert enrollment.has_completed(content_id)
        assert enrollment.last_completed_at is not None
        assert enrollment.version == 1

    @pytest.mark.asyncio
    async def test_completing_twice_is_noop(
        self, progress_service: ProgressService, catalog, student, course, enrolled
    ):
        """Should not double-count or change progress on the second call."""
        content_id = catalog.content_ids(course.course_id)[0]

        first, _ = await progress_service.mark_content_complete(
            student.student_id, course.course_id, content_id
        )
        second, was_new = await progress_service.mark_content_complete(
            student.student_id, course.course_id, content_id
        )

        assert was_new is False
        assert second.progress == first.progress
        assert len(second.completed_content) == 1
        assert second.version == first.version
        assert second.completed_content[content_id] == first.completed_content[content_id]

    @pytest.mark.asyncio
    async def test_record_completion_returns_progress(
        self, progress_service: ProgressService, catalog, student, course, enrolled
    ):
        """Should return (progress, was_new)."""
        ids = catalog.content_ids(course.course_id)

        assert await progress_service.record_completion(
            student.student_id, course.course_id, ids[0]
        ) == (25, True)
        assert await progress_service.record_completion(
            student.student_id, course.course_id, ids[1]
        ) == (50, True)
        assert await progress_service.record_completion(
            student.student_id, course.course_id, ids[1]
        ) == (50, False)

    @pytest.mark.asyncio
    async def test_all_items_reach_100(
        self, progress_service: ProgressService, catalog, student, course, enrolled
    ):
        """Should reach 100 when every item is completed."""
        for content_id in catalog.content_ids(course.course_id):
            enrollment, _ = await progress_service.mark_content_complete(
                student.student_id, course.course_id, content_id
            )

        assert enrollment.progress == 100
        assert enrollment.is_completed

    @pytest.mark.asyncio
    async def test_uses_live_catalog_count(
        self, progress_service: ProgressService, catalog, student, course, enrolled
    ):
        """Should divide by the catalog size at the time of completion."""
        catalog.add_item(course.course_id)
        content_id = catalog.content_ids(course.course_id)[0]

        enrollment, _ = await progress_service.mark_content_complete(
            student.student_id, course.course_id, content_id
        )

        assert enrollment.progress == 20

    @pytest.mark.asyncio
    async def test_unknown_content(
        self, progress_service: ProgressService, student, course, enrolled
    ):
        """Should reject a content id that does not exist."""
        with pytest.raises(ContentNotFoundError):
            await progress_service.mark_content_complete(
                student.student_id, course.course_id, uuid4()
            )

    @pytest.mark.asyncio
    async def test_content_from_other_course(
        self, progress_service: ProgressService, catalog, student, course, enrolled
    ):
        """Should reject content belonging to another course."""
        other = catalog.add_course("Difference Engines", item_count=1)
        foreign_id = catalog.content_ids(other.course_id)[0]

        with pytest.raises(ContentNotInCourseError):
            await progress_service.mark_content_complete(
                student.student_id, course.course_id, foreign_id
            )

    @pytest.mark.asyncio
    async def test_not_enrolled(
        self, progress_service: ProgressService, catalog, student, course
    ):
        """Should fail when the student is not enrolled."""
        content_id = catalog.content_ids(course.course_id)[0]

        with pytest.raises(EnrollmentNotFoundError):
            await progress_service.mark_content_complete(
                student.student_id, course.course_id, content_id
            )


class TestConcurrentCompletion:
    """Concurrent completions on the same enrollment."""

    @pytest.mark.asyncio
    async def test_no_lost_update(
        self,
        progress_service: ProgressService,
        enrollment_repository,
        catalog,
        student,
        course,
    ):
        """Should keep both items when completed at the same time."""
        await progress_service.enroll(student.student_id, course.course_id)
        first, second = catalog.content_ids(course.course_id)[:2]

        await asyncio.gather(
            progress_service.mark_content_complete(
                student.student_id, course.course_id, first
            ),
            progress_service.mark_content_complete(
                student.student_id, course.course_id, second
            ),
        )

        stored = await progress_service.get_enrollment(
            student.student_id, course.course_id
        )
        assert set(stored.completed_content) == {first, second}
        assert stored.progress == 50
        assert stored.version == 2
        assert enrollment_repository.conflicts >= 1

    @pytest.mark.asyncio
    async def test_all_items_at_once(
        self, progress_service: ProgressService, catalog, student, course
    ):
        """Should reach 100 when every item is completed concurrently."""
        await progress_service.enroll(student.student_id, course.course_id)
        ids = catalog.content_ids(course.course_id)

        await asyncio.gather(
            *(
                progress_service.mark_content_complete(
                    student.student_id, course.course_id, content_id
                )
                for content_id in ids
            )
        )

        stored = await progress_service.get_enrollment(
            student.student_id, course.course_id
        )
        assert set(stored.completed_content) == set(ids)
        assert stored.progress == 100

    @pytest.mark.asyncio
    async def test_same_item_concurrently_counts_once(
        self, progress_service: ProgressService, catalog, student, course
    ):
        """Should report exactly one new completion for duplicate events."""
        await progress_service.enroll(student.student_id, course.course_id)
        content_id = catalog.content_ids(course.course_id)[0]

        results = await asyncio.gather(
            progress_service.mark_content_complete(
                student.student_id, course.course_id, content_id
            ),
            progress_service.mark_content_complete(
                student.student_id, course.course_id, content_id
            ),
        )

        assert sorted(was_new for _, was_new in results) == [False, True]
        assert all(enrollment.progress == 25 for enrollment, _ in results)

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(
        self, enrollment_repository, catalog, students, student, course
    ):
        """Should raise a conflict when every compare-and-set loses."""
        service = ProgressService(
            repository=enrollment_repository,
            catalog=catalog,
            students=students,
            max_update_retries=3,
        )
        await service.enroll(student.student_id, course.course_id)

        async def always_lose(enrollment, expected_version):
            enrollment_repository.conflicts += 1
            return False

        enrollment_repository.compare_and_set = always_lose
        content_id = catalog.content_ids(course.course_id)[0]

        with pytest.raises(ConcurrentUpdateError):
            await service.mark_content_complete(
                student.student_id, course.course_id, content_id
            )
        assert enrollment_repository.conflicts == 3


class TestGetCourseProgress:
    """Tests for get_course_progress."""

    @pytest.mark.asyncio
    async def test_reports_totals(
        self, progress_service: ProgressService, catalog, student, course
    ):
        """Should return progress, completed items and total items."""
        await progress_service.enroll(student.student_id, course.course_id)
        content_id = catalog.content_ids(course.course_id)[0]
        await progress_service.mark_content_complete(
            student.student_id, course.course_id, content_id
        )

        result = await progress_service.get_course_progress(
            student.student_id, course.course_id
        )

        assert result.progress == 25
        assert result.total_items == 4
        assert list(result.enrollment.completed_content) == [content_id]
        assert not result.is_completed

    @pytest.mark.asyncio
    async def test_recomputes_against_current_catalog(
        self, progress_service: ProgressService, catalog, student, course
    ):
        """Should recompute instead of trusting the stored percentage."""
        await progress_service.enroll(student.student_id, course.course_id)
        for content_id in catalog.content_ids(course.course_id):
            await progress_service.mark_content_complete(
                student.student_id, course.course_id, content_id
            )
        catalog.add_item(course.course_id)

        result = await progress_service.get_course_progress(
            student.student_id, course.course_id
        )

        assert result.enrollment.progress == 100
        assert result.progress == 80
        assert result.total_items == 5

    @pytest.mark.asyncio
    async def test_not_enrolled(self, progress_service: ProgressService, student, course):
        """Should fail when no enrollment exists."""
        with pytest.raises(EnrollmentNotFoundError):
            await progress_service.get_course_progress(
                student.student_id, course.course_id
            )

    @pytest.mark.asyncio
    async def test_list_student_enrollments(
        self, progress_service: ProgressService, catalog, student, course
    ):
        """Should list the student's enrollments with completed counts."""
        other = catalog.add_course("Looms", item_count=2)
        await progress_service.enroll(student.student_id, course.course_id)
        await progress_service.enroll(student.student_id, other.course_id)
        await progress_service.mark_content_complete(
            student.student_id, other.course_id, catalog.content_ids(other.course_id)[0]
        )

        summaries = await progress_service.list_student_enrollments(student.student_id)

        by_course = {s.course_id: s for s in summaries}
        assert by_course[course.course_id].progress == 0
        assert by_course[other.course_id].progress == 50
        assert by_course[other.course_id].completed_count == 1
