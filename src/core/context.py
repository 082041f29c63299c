"""Request context management using contextvars.

Each request gets a request ID plus optional trace and correlation IDs that are
visible anywhere in the call stack (and in every log line) without passing them
explicitly. Work deferred past the end of a request (certificate issuance in the
background) captures a snapshot and re-enters it with ``RequestContext``.
"""

from contextvars import ContextVar
from typing import Any
from uuid import UUID, uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
student_id_var: ContextVar[str | None] = ContextVar("student_id", default=None)
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def generate_request_id() -> str:
    """Generate a new unique request ID."""
    return str(uuid4())


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID for the current context.

    Args:
        request_id: Optional request ID. If not provided, generates a new one.

    Returns:
        The request ID that was set.
    """
    rid = request_id or generate_request_id()
    request_id_var.set(rid)
    return rid


def get_student_id() -> str | None:
    """Get the student the current request acts on."""
    return student_id_var.get()


def set_student_id(student_id: str | UUID | None) -> None:
    """Set the student ID for the current context."""
    student_id_var.set(str(student_id) if student_id is not None else None)


def get_trace_id() -> str | None:
    """Get the current trace ID."""
    return trace_id_var.get()


def set_trace_id(trace_id: str | None) -> None:
    """Set the trace ID for the current context."""
    trace_id_var.set(trace_id)


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    correlation_id_var.set(correlation_id)


def get_context() -> dict[str, Any]:
    """Get all non-empty context variables as a dictionary."""
    context: dict[str, Any] = {
        "request_id": get_request_id(),
        "student_id": get_student_id(),
        "trace_id": get_trace_id(),
        "correlation_id": get_correlation_id(),
    }
    return {key: value for key, value in context.items() if value}


def clear_context() -> None:
    """Clear all context variables.

    Called at the end of each request to prevent leakage between requests.
    """
    request_id_var.set("")
    student_id_var.set(None)
    trace_id_var.set(None)
    correlation_id_var.set(None)


class RequestContext:
    """Context manager that (re)enters a request scope.

    Usage:
        snapshot = get_context()
        ...
        with RequestContext(**snapshot):
            logger.info("certificate_issued")  # carries the original request_id
    """

    _VARS: dict[str, ContextVar] = {
        "request_id": request_id_var,
        "student_id": student_id_var,
        "trace_id": trace_id_var,
        "correlation_id": correlation_id_var,
    }

    def __init__(
        self,
        request_id: str | None = None,
        student_id: str | UUID | None = None,
        trace_id: str | None = None,
        correlation_id: str | None = None,
    ) -> None:
        self._values: dict[str, Any] = {
            "request_id": request_id or generate_request_id(),
            "student_id": str(student_id) if student_id is not None else None,
            "trace_id": trace_id,
            "correlation_id": correlation_id,
        }
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "RequestContext":
        """Enter context and set variables."""
        for name, value in self._values.items():
            if value is not None:
                self._tokens[name] = self._VARS[name].set(value)
        return self

    def __exit__(self, *_: object) -> None:
        """Exit context and restore previous values."""
        for name, token in self._tokens.items():
            self._VARS[name].reset(token)
        self._tokens.clear()
