"""Tests for student directory endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient


def test_get_student(client: TestClient, student) -> None:
    """Should return a registered student."""
    response = client.get(f"/v1/students/{student.student_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["full_name"] == "Ada Lovelace"
    assert data["email"] == "ada@example.com"


def test_get_unknown_student(client: TestClient) -> None:
    """Should return 404 for an unknown id."""
    response = client.get(f"/v1/students/{uuid4()}")

    assert response.status_code == 404
    assert response.json()["message"] == "Student not found"
