"""Page slicing for ranked results."""
import math
from typing import Sequence

from src.data.models import PageEnvelope, RankedResult


def paginate(ranked: Sequence[RankedResult], page: int, page_size: int) -> PageEnvelope:
    """Slice ``ranked`` into a 1-indexed page.

    A page past the end returns no items but still reports the real totals.
    ``total_pages`` is at least 1, so an empty result is one empty page.
    """
    total_count = len(ranked)
    total_pages = max(1, math.ceil(total_count / page_size))
    offset = (page - 1) * page_size
    items = list(ranked[offset : offset + page_size]) if offset < total_count else []
    return PageEnvelope(
        items=items,
        page=page,
        page_size=page_size,
        total_count=total_count,
        total_pages=total_pages,
    )
