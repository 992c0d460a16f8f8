"""
Cursor math for id-ordered pagination.

The upstream API only pages forward (offset/limit). Ascending order walks
offsets from 0 up to MAX; descending order mirrors that walk from the end
of the catalog, shrinking the final page so the offset never goes below 0.
"""

from typing import NamedTuple


class PageRequest(NamedTuple):
    offset: int
    limit: int


def ascending_page(cursor: int, limit: int, max_count: int) -> PageRequest | None:
    """
    Next forward page starting at cursor, or None once the catalog is exhausted.

    The last page is trimmed so it never reaches past max_count.
    """
    if cursor >= max_count:
        return None
    return PageRequest(offset=cursor, limit=min(limit, max_count - cursor))


def next_ascending_cursor(page: PageRequest) -> int:
    return page.offset + page.limit


def descending_page(cursor: int, limit: int) -> PageRequest | None:
    """
    Next page below a descending cursor, or None once offset 0 was fetched.

    cursor is the exclusive upper bound still to be loaded; it starts at
    max_count. With max_count=1025 and limit=10 the walk is
    (1015, 10), (1005, 10), ..., (5, 10), (0, 5).
    """
    if cursor <= 0:
        return None
    offset = cursor - limit
    if offset < 0:
        return PageRequest(offset=0, limit=cursor)
    return PageRequest(offset=offset, limit=limit)


def next_descending_cursor(page: PageRequest) -> int:
    return page.offset
