"""Query engine: filters, ordering, pagination and the listing service."""
from .engine import Page, matches, normalize_order_key, paginate, shuffled, sort_items
from .filters import DEFAULT_LIMIT, DEFAULT_OFFSET, QueryFilter, parse_non_negative_int, parse_query_filter
from .service import LibraryQueryService, serialize_page

__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_OFFSET",
    "LibraryQueryService",
    "Page",
    "QueryFilter",
    "matches",
    "normalize_order_key",
    "paginate",
    "parse_non_negative_int",
    "parse_query_filter",
    "serialize_page",
    "shuffled",
    "sort_items",
]
