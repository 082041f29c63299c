"""Domain error taxonomy shared by the catalog, progress and certificate modules.

Every error carries a human readable ``message`` and a machine ``code``.
Errors are grouped in four kinds that decide how they surface over HTTP:

- NotFoundError: the addressed entity does not exist (404)
- ConflictError: the request collides with existing state (409)
- ValidationError: the request references something invalid (400)
- UpstreamError: a collaborator (catalog, renderer, artifact store) failed (503)
"""

from fastapi import HTTPException, status


class LMSError(Exception):
    """Base domain error."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, code: str = "lms_error"):
        self.message = message
        self.code = code
        super().__init__(message)


# ==============================================================================
# Error Kinds
# ==============================================================================


class NotFoundError(LMSError):
    """Entity absent."""

    http_status = status.HTTP_404_NOT_FOUND


class ConflictError(LMSError):
    """Request conflicts with current state."""

    http_status = status.HTTP_409_CONFLICT


class ValidationError(LMSError):
    """Malformed identifier or out-of-range reference."""

    http_status = status.HTTP_400_BAD_REQUEST


class UpstreamError(LMSError):
    """Collaborator failure (catalog, renderer, artifact store)."""

    http_status = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(
        self, message: str, code: str = "upstream_error", retryable: bool = True
    ):
        self.retryable = retryable
        super().__init__(message, code)


# ==============================================================================
# Not Found
# ==============================================================================


class CourseNotFoundError(NotFoundError):
    """Course does not exist."""

    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")


class ContentNotFoundError(NotFoundError):
    """Content item does not exist."""

    def __init__(self, message: str = "Content item not found"):
        super().__init__(message, "content_not_found")


class StudentNotFoundError(NotFoundError):
    """Student does not exist."""

    def __init__(self, message: str = "Student not found"):
        super().__init__(message, "student_not_found")


class EnrollmentNotFoundError(NotFoundError):
    """No enrollment for the (student, course) pair."""

    def __init__(self, message: str = "Student is not enrolled in this course"):
        super().__init__(message, "not_enrolled")


class CertificateNotFoundError(NotFoundError):
    """Certificate does not exist."""

    def __init__(self, message: str = "Certificate not found"):
        super().__init__(message, "certificate_not_found")


# ==============================================================================
# Conflict
# ==============================================================================


class AlreadyEnrolledError(ConflictError):
    """Enrollment already exists for the pair."""

    def __init__(self, message: str = "Student already enrolled in this course"):
        super().__init__(message, "already_enrolled")


class ConcurrentUpdateError(ConflictError):
    """Compare-and-set kept losing against concurrent writers."""

    def __init__(self, message: str = "Enrollment is being updated concurrently"):
        super().__init__(message, "concurrent_update")


# ==============================================================================
# Validation
# ==============================================================================


class ContentNotInCourseError(ValidationError):
    """Content item belongs to another course."""

    def __init__(self, message: str = "Content item does not belong to this course"):
        super().__init__(message, "content_not_in_course")


class CourseNotCompletedError(ValidationError):
    """Certificate requested before reaching 100% progress."""

    def __init__(self, progress: int):
        self.progress = progress
        super().__init__(
            f"Course not completed. Current progress: {progress}%",
            "course_not_completed",
        )


class InvalidCertificateIdError(ValidationError):
    """Certificate token is malformed."""

    def __init__(self, message: str = "Invalid certificate id"):
        super().__init__(message, "invalid_certificate_id")


# ==============================================================================
# Upstream
# ==============================================================================


class CatalogUnavailableError(UpstreamError):
    """Course catalog could not be read."""

    def __init__(self, message: str = "Course catalog unavailable"):
        super().__init__(message, "catalog_unavailable")


class RenderError(UpstreamError):
    """Certificate artifact could not be rendered."""

    def __init__(self, message: str = "Certificate rendering failed"):
        super().__init__(message, "render_error")


class CertificateStoreUnavailableError(UpstreamError):
    """Certificate tables could not be read or written."""

    def __init__(self, message: str = "Certificate store unavailable"):
        super().__init__(message, "certificate_store_unavailable")


class CertificateIssuanceError(UpstreamError):
    """Certificate could not be rendered or stored; safe to retry."""

    def __init__(self, message: str = "Certificate issuance failed"):
        super().__init__(message, "certificate_issuance_failed", retryable=True)


class DomainHTTPException(HTTPException):
    """HTTPException that keeps the machine code of the domain error."""

    def __init__(self, status_code: int, detail: str, code: str):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code


def to_http_exception(error: LMSError) -> DomainHTTPException:
    """Convert a domain error to an HTTP exception.

    Args:
        error: Domain error

    Returns:
        HTTPException with the status code of the error kind and its code
    """
    return DomainHTTPException(
        status_code=error.http_status, detail=error.message, code=error.code
    )
