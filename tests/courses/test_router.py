"""Tests for course catalog endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient


def test_get_course_with_count(client: TestClient, course) -> None:
    """Should return the course and its catalog size."""
    response = client.get(f"/v1/courses/{course.course_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Analytical Engines"
    assert data["content_count"] == 4


def test_get_unknown_course(client: TestClient) -> None:
    """Should return 404 for an unknown course."""
    response = client.get(f"/v1/courses/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["message"] == "Course not found"
