"""Search, filter, sort and paginate in-memory collections.

Backs the list endpoints of the mock service layer. Works on pydantic models
or plain mappings; fields are looked up by attribute first, then by key.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Literal, Mapping, Sequence, TypeVar

from app.core.errors import ValidationAppError

T = TypeVar("T")

MAX_PAGE_SIZE = 100

SortOrder = Literal["asc", "desc"]


@dataclass(frozen=True)
class QueryParams:
    """Query options for a list request.

    Attributes:
        page: 1-based page number.
        limit: Page size (1..MAX_PAGE_SIZE).
        sort_by: Field to sort on, or None to keep insertion order.
        sort_order: "asc" or "desc".
        search: Case-insensitive substring matched against the search fields.
        filters: Field name to allowed value (or list of allowed values).
    """

    page: int = 1
    limit: int = 10
    sort_by: str | None = None
    sort_order: SortOrder = "asc"
    search: str | None = None
    filters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationAppError(
                code="invalid_page",
                message="page must be >= 1",
                details={"field": "page"},
            )
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValidationAppError(
                code="invalid_limit",
                message=f"limit must be between 1 and {MAX_PAGE_SIZE}",
                details={"field": "limit"},
            )
        if self.sort_order not in ("asc", "desc"):
            raise ValidationAppError(
                code="invalid_sort_order",
                message="sort_order must be 'asc' or 'desc'",
                details={"field": "sort_order", "allowed": ["asc", "desc"]},
            )


@dataclass(frozen=True)
class PageMeta:
    page: int
    limit: int
    total: int
    total_pages: int


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    meta: PageMeta


def _get_field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _sort_key(value: Any) -> Any:
    if isinstance(value, str):
        return value.casefold()
    return value


def _as_allowed_set(value: Any) -> set[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return set(value)
    return {value}


def search_items(items: Iterable[T], search: str | None, fields: Sequence[str]) -> list[T]:
    """Keep items where any of ``fields`` contains ``search`` (case-insensitive)."""
    needle = (search or "").strip().casefold()
    if not needle:
        return list(items)
    return [
        item
        for item in items
        if any(needle in str(_get_field(item, f) or "").casefold() for f in fields)
    ]


def filter_items(items: Iterable[T], filters: Mapping[str, Any]) -> list[T]:
    """Keep items whose fields match every filter; empty filter values are ignored."""
    active = {
        name: _as_allowed_set(value)
        for name, value in filters.items()
        if value not in (None, "", [], ())
    }
    if not active:
        return list(items)
    return [
        item
        for item in items
        if all(_get_field(item, name) in allowed for name, allowed in active.items())
    ]


def sort_items(items: Iterable[T], sort_by: str, sort_order: SortOrder = "asc") -> list[T]:
    """Stable sort on one field; items missing the field always go last."""
    present: list[T] = []
    missing: list[T] = []
    for item in items:
        (missing if _is_missing(_get_field(item, sort_by)) else present).append(item)

    present.sort(
        key=lambda item: _sort_key(_get_field(item, sort_by)),
        reverse=sort_order == "desc",
    )
    return present + missing


def paginate(items: Sequence[T], page: int, limit: int) -> Page[T]:
    total = len(items)
    total_pages = math.ceil(total / limit) if total else 0
    start = (page - 1) * limit
    return Page(
        items=list(items[start : start + limit]),
        meta=PageMeta(page=page, limit=limit, total=total, total_pages=total_pages),
    )


def apply_query(
    items: Iterable[T],
    params: QueryParams,
    *,
    search_fields: Sequence[str] = (),
    sortable: Iterable[str] | None = None,
    filterable: Iterable[str] | None = None,
) -> Page[T]:
    """Run search, filters, sort and pagination over ``items``.

    Args:
        items: Source collection (not mutated).
        params: Query options.
        search_fields: Fields matched by ``params.search``.
        sortable: Fields allowed in ``params.sort_by`` (None allows any).
        filterable: Fields allowed as filter names (None allows any).

    Returns:
        Page with the requested slice and pagination metadata.

    Raises:
        ValidationAppError: On an unknown sort or filter field.
    """
    if params.sort_by and sortable is not None and params.sort_by not in set(sortable):
        allowed = sorted(sortable)
        raise ValidationAppError(
            code="invalid_sort_field",
            message=f"Cannot sort by '{params.sort_by}'",
            details={"field": "sort_by", "allowed": allowed},
        )
    if filterable is not None:
        unknown = set(params.filters) - set(filterable)
        if unknown:
            raise ValidationAppError(
                code="invalid_filter_field",
                message=f"Cannot filter by '{sorted(unknown)[0]}'",
                details={"field": "filters", "allowed": sorted(filterable)},
            )

    result = search_items(items, params.search, search_fields)
    result = filter_items(result, params.filters)
    if params.sort_by:
        result = sort_items(result, params.sort_by, params.sort_order)
    return paginate(result, params.page, params.limit)
