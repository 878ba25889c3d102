"""
Query engine: predicate matching, ordering and pagination.

Everything here is pure; randomness comes from the caller's `random.Random`.
"""
from __future__ import annotations

import json
import random
from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar, Union

from efs_backend.features.library.models import Item, LightItem
from efs_backend.shared import normalize_extension

from .filters import DEFAULT_LIMIT, DEFAULT_OFFSET, QueryFilter, parse_non_negative_int

T = TypeVar("T")
Matchable = Union[Item, LightItem]

ORDER_RANDOM = "random"

# order key -> (sort field accessor, descending)
_ORDERINGS: dict[str, tuple[Callable[[Item], object], bool]] = {
    "name": (lambda i: (i.name.casefold(), i.name), False),
    "name_asc": (lambda i: (i.name.casefold(), i.name), False),
    "name_desc": (lambda i: (i.name.casefold(), i.name), True),
    "created": (lambda i: i.created_at, False),
    "created_asc": (lambda i: i.created_at, False),
    "created_desc": (lambda i: i.created_at, True),
    "modified": (lambda i: i.modified_at, False),
    "modified_asc": (lambda i: i.modified_at, False),
    "modified_desc": (lambda i: i.modified_at, True),
    "size": (lambda i: i.size, False),
    "size_asc": (lambda i: i.size, False),
    "size_desc": (lambda i: i.size, True),
}


def normalize_order_key(order_by: str | None) -> str:
    """Lower-cased ordering key; unset and unknown values mean random."""
    key = str(order_by or "").strip().lower()
    return key if key in _ORDERINGS else ORDER_RANDOM


def _folded(values: Sequence[str]) -> set[str]:
    return {v.casefold() for v in values}


def _metadata_text(item: Matchable) -> str:
    try:
        return json.dumps(item.metadata, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return ""


def matches_keyword(item: Matchable, keyword: str) -> bool:
    needle = keyword.casefold()
    if needle in item.name.casefold():
        return True
    if any(needle in tag.casefold() for tag in item.tags):
        return True
    return needle in _metadata_text(item).casefold()


def matches(item: Matchable, query: QueryFilter) -> bool:
    """
    Test an item against a filter.

    Tags use AND semantics (every tag must be present); folders use OR
    semantics (any one folder is enough). Both compare case-insensitively.
    """
    if query.keyword and not matches_keyword(item, query.keyword):
        return False
    if query.extensions:
        wanted = {normalize_extension(e) for e in query.extensions}
        if normalize_extension(item.extension) not in wanted:
            return False
    if query.tags:
        have = _folded(item.tags)
        if not all(tag.casefold() in have for tag in query.tags):
            return False
    if query.folders:
        have = _folded(item.folders)
        if not any(folder.casefold() in have for folder in query.folders):
            return False
    return True


def shuffled(items: Sequence[T], rng: random.Random) -> list[T]:
    """Uniform random permutation (Fisher-Yates) of a copy of `items`."""
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out


def sort_items(items: Sequence[Item], order_by: str | None, rng: random.Random) -> list[Item]:
    """Return a newly ordered list; `items` itself is never reordered."""
    key = normalize_order_key(order_by)
    if key == ORDER_RANDOM:
        return shuffled(items, rng)
    accessor, descending = _ORDERINGS[key]
    return sorted(items, key=accessor, reverse=descending)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int


def paginate(items: Sequence[T], limit: object = None, offset: object = None) -> Page[T]:
    limit_int = parse_non_negative_int(limit, DEFAULT_LIMIT)
    offset_int = parse_non_negative_int(offset, DEFAULT_OFFSET)
    return Page(
        items=list(items[offset_int : offset_int + limit_int]),
        total=len(items),
        limit=limit_int,
        offset=offset_int,
    )
