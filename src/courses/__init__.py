"""Course content catalog module.

Provides:
- Course creation and lookup
- Ordered content items with stable identifiers
- Content count used as the progress denominator
"""

from .models import COURSES_TABLES_CQL, ContentItem, ContentType, Course


__all__ = [
    "COURSES_TABLES_CQL",
    "ContentItem",
    "ContentType",
    "Course",
]
