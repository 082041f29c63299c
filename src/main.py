"""Coursetrack API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.certificates.renderer import CertificateRenderer
from src.certificates.repository import CertificateRepository
from src.certificates.router import router as certificates_router
from src.certificates.service import CertificateService
from src.config import Settings, get_settings
from src.core.context import get_request_id
from src.core.database import init_async_cassandra, shutdown_async_cassandra
from src.core.exceptions import DomainHTTPException, LMSError
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.courses.router import router as courses_router
from src.courses.service import CourseCatalogService
from src.health import router as health_router
from src.progress.repository import EnrollmentRepository
from src.progress.router import router as enrollments_router
from src.progress.service import ProgressService
from src.progress.workflow import CompletionWorkflow
from src.storage.service import FirebaseStorageService
from src.students.router import router as students_router
from src.students.service import StudentService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


@dataclass
class Services:
    """Service graph wired on top of one Cassandra session."""

    student_service: StudentService
    catalog_service: CourseCatalogService
    progress_service: ProgressService
    certificate_service: CertificateService
    completion_workflow: CompletionWorkflow


def build_services(session: Any, settings: Settings) -> Services:
    """Wire repositories, services and the completion workflow."""
    keyspace = settings.cassandra_keyspace

    student_service = StudentService(session=session, keyspace=keyspace)
    catalog_service = CourseCatalogService(session=session, keyspace=keyspace)
    progress_service = ProgressService(
        repository=EnrollmentRepository(session=session, keyspace=keyspace),
        catalog=catalog_service,
        students=student_service,
        max_update_retries=settings.progress_max_update_retries,
    )
    certificate_service = CertificateService(
        repository=CertificateRepository(session=session, keyspace=keyspace),
        renderer=CertificateRenderer(),
        storage=FirebaseStorageService(settings),
        students=student_service,
        catalog=catalog_service,
        progress_service=progress_service,
        verify_base_url=settings.certificate_verify_base_url,
    )
    completion_workflow = CompletionWorkflow(
        progress_service=progress_service,
        certificate_service=certificate_service,
        issue_mode=settings.certificate_issue_mode,
    )
    return Services(
        student_service=student_service,
        catalog_service=catalog_service,
        progress_service=progress_service,
        certificate_service=certificate_service,
        completion_workflow=completion_workflow,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        certificate_issue_mode=settings.certificate_issue_mode,
    )

    try:
        session = await init_async_cassandra()
        logger.info("cassandra_initialized")

        services = build_services(session, settings)
        app.state.cassandra_session = session
        for name, service in vars(services).items():
            setattr(app.state, name, service)
        logger.info(
            "services_initialized",
            storage_configured=settings.firebase_configured,
        )
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # SECURITY: debug=False keeps Starlette's ServerErrorMiddleware from
    # rendering stack traces; the handlers below log details internally.
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Course progress and certificate API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    def _error_response(
        request: Request, status_code: int, message: str, **extra: Any
    ) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=status_code,
            content={
                "error": True,
                "message": message,
                "status_code": status_code,
                "request_id": _get_request_id_safe(request),
                **extra,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        extra = {"code": exc.code} if isinstance(exc, DomainHTTPException) else {}
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            exc.status_code,
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            or exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
            else "Internal server error",
            **extra,
        )

    @app.exception_handler(LMSError)
    async def domain_exception_handler(
        request: Request, exc: LMSError
    ) -> ORJSONResponse:
        """Handle domain errors that escaped a router."""
        logger.warning(
            "domain_error",
            code=exc.code,
            status_code=exc.http_status,
            detail=exc.message,
            path=request.url.path,
            method=request.method,
        )
        return _error_response(request, exc.http_status, exc.message, code=exc.code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors with safe error messages."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error",
            details=[
                {
                    "field": ".".join(str(loc) for loc in err.get("loc", [])),
                    "message": err.get("msg", "Invalid value"),
                }
                for err in exc.errors()
            ],
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        SECURITY: Never expose stack traces or internal error details to users.
        """
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
        )

    app.include_router(health_router)
    app.include_router(students_router)
    app.include_router(courses_router)
    app.include_router(enrollments_router)
    app.include_router(certificates_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Coursetrack API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
