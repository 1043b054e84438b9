"""Page-by-page materialization of a query."""

import logging
import math
from typing import TYPE_CHECKING, List

from ..errors import ArgumentError
from ..models import Page

if TYPE_CHECKING:
    from ..query import Query

logger = logging.getLogger(__name__)


def paginate(query: "Query", per_page: int) -> List[Page]:
    """Split a query's results into pages.

    The query's own limit (if any) caps the total material paginated, and
    its own offset is where page 1 begins.

    Args:
        query: Query to paginate
        per_page: Items per page, must be positive

    Returns:
        Every page in order. An empty query yields a single empty page.

    Raises:
        ArgumentError: If per_page is not a positive integer
    """
    if isinstance(per_page, bool) or not isinstance(per_page, int) or per_page <= 0:
        raise ArgumentError(f"per_page must be a positive integer, got {per_page!r}")

    total_items = query.count()
    if total_items == 0:
        return [Page(items=[], current_page=1, total_pages=1, total_items=0)]

    total_pages = math.ceil(total_items / per_page)
    base_offset = max(query.offset_count or 0, 0)
    limit = query.limit_count

    pages = []
    for page_num in range(1, total_pages + 1):
        page_offset = (page_num - 1) * per_page
        if limit is not None:
            items_this_page = min(max(limit - page_offset, 0), per_page)
        else:
            items_this_page = per_page

        items = query.offset(base_offset + page_offset).limit(items_this_page).all()
        pages.append(
            Page(
                items=items,
                current_page=page_num,
                total_pages=total_pages,
                total_items=total_items,
            )
        )

    logger.debug(
        "Paginated %s: %d items into %d pages of %d",
        query.collection_name, total_items, total_pages, per_page,
    )
    return pages
