"""Shared fixtures.

Services run on in-memory collaborators; the FastAPI app is used without its
lifespan so no Cassandra cluster is needed.
"""

import os


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src.certificates.service import CertificateService  # noqa: E402
from src.courses.models import Course  # noqa: E402
from src.progress.service import ProgressService  # noqa: E402
from src.progress.workflow import CompletionWorkflow  # noqa: E402
from src.students.models import Student  # noqa: E402

from .fakes import (  # noqa: E402
    FakeRenderer,
    FakeStorage,
    InMemoryCatalog,
    InMemoryCertificateRepository,
    InMemoryEnrollmentRepository,
    InMemoryStudents,
)


@pytest.fixture
def enrollment_repository() -> InMemoryEnrollmentRepository:
    return InMemoryEnrollmentRepository()


@pytest.fixture
def certificate_repository() -> InMemoryCertificateRepository:
    return InMemoryCertificateRepository()


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog()


@pytest.fixture
def students() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def student(students: InMemoryStudents) -> Student:
    """Test student."""
    return students.add("Ada Lovelace")


@pytest.fixture
def course(catalog: InMemoryCatalog) -> Course:
    """Course with four content items."""
    return catalog.add_course("Analytical Engines", item_count=4)


@pytest.fixture
def progress_service(
    enrollment_repository: InMemoryEnrollmentRepository,
    catalog: InMemoryCatalog,
    students: InMemoryStudents,
) -> ProgressService:
    return ProgressService(
        repository=enrollment_repository,
        catalog=catalog,
        students=students,
        max_update_retries=5,
    )


@pytest.fixture
def certificate_service(
    certificate_repository: InMemoryCertificateRepository,
    renderer: FakeRenderer,
    storage: FakeStorage,
    students: InMemoryStudents,
    catalog: InMemoryCatalog,
    progress_service: ProgressService,
) -> CertificateService:
    return CertificateService(
        repository=certificate_repository,
        renderer=renderer,
        storage=storage,
        students=students,
        catalog=catalog,
        progress_service=progress_service,
        verify_base_url="https://lms.example.com/verify/",
    )


@pytest.fixture
def workflow(
    progress_service: ProgressService, certificate_service: CertificateService
) -> CompletionWorkflow:
    """Workflow issuing certificates inline."""
    return CompletionWorkflow(
        progress_service=progress_service,
        certificate_service=certificate_service,
        issue_mode="inline",
    )


@pytest.fixture
def client(
    progress_service: ProgressService,
    certificate_service: CertificateService,
    catalog: InMemoryCatalog,
    students: InMemoryStudents,
):
    """Test client with services wired on in-memory collaborators."""
    from src.main import app  # noqa: PLC0415

    app.state.student_service = students
    app.state.catalog_service = catalog
    app.state.progress_service = progress_service
    app.state.certificate_service = certificate_service
    app.state.completion_workflow = CompletionWorkflow(
        progress_service=progress_service,
        certificate_service=certificate_service,
        issue_mode="deferred",
    )

    yield TestClient(app)

    for name in (
        "student_service",
        "catalog_service",
        "progress_service",
        "certificate_service",
        "completion_workflow",
    ):
        setattr(app.state, name, None)
