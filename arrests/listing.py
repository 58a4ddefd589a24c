"""Paginated arrest log, newest first."""

from __future__ import annotations

import math
from datetime import date, datetime, time

from arrests.filters import CompiledFilter, ConditionSet, Filter, compile_filter
from arrests.source import ArrestSource, gather

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500

ORDER_BY = "arrest_date DESC NULLS LAST, arrest_time DESC NULLS LAST, arrest_id"


def _with_search(compiled: CompiledFilter, search: str | None) -> ConditionSet:
    conditions = compiled.base
    if search and search.strip():
        conditions = conditions.extend(
            "(contains(LOWER(COALESCE(first_name, '')), $search)"
            " OR contains(LOWER(COALESCE(last_name, '')), $search)"
            " OR contains(LOWER(COALESCE(charges, '')), $search))",
            search=search.strip().lower(),
        )
    return conditions


def _serialize(record: dict) -> dict:
    return {
        k: v.isoformat() if isinstance(v, (date, datetime, time)) else v
        for k, v in record.items()
    }


def list_arrests(
    source: ArrestSource,
    f: Filter,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    search: str | None = None,
    *,
    max_page_size: int = MAX_PAGE_SIZE,
) -> dict:
    """One 1-indexed page of arrests matching ``f`` and ``search``.

    Pages past the end come back empty with the real total.
    """
    page = max(1, page)
    page_size = min(max(1, page_size), max_page_size)
    conditions = _with_search(compile_filter(f), search)

    res = gather(
        {
            "total": lambda: source.count(conditions),
            "records": lambda: source.scan(
                conditions, ORDER_BY, limit=page_size, offset=(page - 1) * page_size
            ),
        },
        max_workers=2,
    )
    total = res["total"]
    return {
        "records": [_serialize(r) for r in res["records"]],
        "total": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": math.ceil(total / page_size),
    }
