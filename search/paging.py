"""
Ordering and pagination for photo searches.
"""

from search.criteria import SortOrder

DEFAULT_COUNT = 100
MAX_COUNT = 1000

# (column, direction) per sort order; photo and file ids break ties
ORDER_COLUMNS = {
    SortOrder.NEWEST: ('photos.taken_at', 'DESC'),
    SortOrder.OLDEST: ('photos.taken_at', 'ASC'),
    SortOrder.IMPORTED: ('photos.created_at', 'DESC'),
}


def sort_order(order):
    """Resolve a requested order name; anything unknown sorts newest first."""
    try:
        return SortOrder(order)
    except ValueError:
        return SortOrder.NEWEST


def order_by_clause(order):
    """Build the ORDER BY body for a requested order name."""
    column, direction = ORDER_COLUMNS[sort_order(order)]
    return f"{column} {direction}, photos.id {direction}, files.id {direction}"


def effective_window(count, offset, default=DEFAULT_COUNT, maximum=MAX_COUNT):
    """Return the (limit, offset) actually used for a requested page.

    A page size outside (0, maximum] resets both to (default, 0); otherwise
    the request is used as given.
    """
    if 0 < count <= maximum:
        return count, offset
    return default, 0
