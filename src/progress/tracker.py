"""Completion percentage computation."""

from collections.abc import Hashable, Iterable
from decimal import ROUND_HALF_UP, Decimal


def compute_progress(
    course_content_count: int,
    completed_content: Iterable[Hashable | None],
) -> int:
    """Integer percentage of distinct content items completed.

    Half values round up (1/8 -> 13), so 1/3 -> 33 and 2/3 -> 67. A course
    without content is never complete. Duplicate and missing (None) ids do
    not count.

    Args:
        course_content_count: Number of items in the course catalog
        completed_content: Completed content ids, possibly repeated

    Returns:
        Percentage in [0, 100]
    """
    if course_content_count <= 0:
        return 0

    distinct = len({cid for cid in completed_content if cid is not None})
    ratio = Decimal(100 * distinct) / Decimal(course_content_count)
    percent = int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(0, min(100, percent))
