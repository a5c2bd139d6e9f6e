"""Page arithmetic for paginated admin lists."""
import math


def total_pages(total: int, per_page: int) -> int:
    if per_page <= 0:
        return 0
    return math.ceil(total / per_page)


def showing(total: int, page: int, per_page: int) -> tuple[int, int]:
    """1-based ``(first, last)`` row numbers on ``page``; ``(0, 0)`` when empty."""
    if total <= 0:
        return 0, 0
    first = (page - 1) * per_page + 1
    return first, min(page * per_page, total)
