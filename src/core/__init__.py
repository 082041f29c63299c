# Core infrastructure
from src.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_correlation_id,
    get_request_id,
    get_student_id,
    get_trace_id,
    set_correlation_id,
    set_request_id,
    set_student_id,
    set_trace_id,
)
from src.core.exceptions import LMSError, to_http_exception
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware


__all__ = [
    "LMSError",
    "RequestContext",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_correlation_id",
    "get_logger",
    "get_request_id",
    "get_student_id",
    "get_trace_id",
    "set_correlation_id",
    "set_request_id",
    "set_student_id",
    "set_trace_id",
    "to_http_exception",
]
