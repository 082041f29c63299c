"""Enrollment progress tracking module.

Provides:
- Course enrollment management
- Idempotent content completion
- Progress computation against the course catalog
- Hand-off to certificate issuance at 100%
"""

from .models import (
    PROGRESS_TABLES_CQL,
    ContentCompletion,
    CourseProgress,
    Enrollment,
    EnrollmentSummary,
)
from .tracker import compute_progress


__all__ = [
    "PROGRESS_TABLES_CQL",
    "ContentCompletion",
    "CourseProgress",
    "Enrollment",
    "EnrollmentSummary",
    "compute_progress",
]
