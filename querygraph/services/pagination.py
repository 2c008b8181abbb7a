"""Pagination Wrapper — bounds a rendered query for page fetches and counts.

The inner query is always rendered in full, including any LIMIT of its own;
the outer LIMIT/OFFSET is authoritative for page boundaries.
"""

from querygraph.core.config import settings
from querygraph.services.sql_renderer import render
from querygraph.services.stage_interpreter import QuerySpec

SUBQUERY_ALIAS = "subquery"


def wrap_page(inner_sql: str, limit: int, offset: int) -> str:
    """Wrap already-rendered SQL with an outer LIMIT/OFFSET."""
    return f"SELECT * FROM ({inner_sql}) AS {SUBQUERY_ALIAS} LIMIT {limit} OFFSET {offset}"


def wrap_count(inner_sql: str) -> str:
    """Wrap already-rendered SQL in a row-count query."""
    return f"SELECT COUNT(*) FROM ({inner_sql}) AS {SUBQUERY_ALIAS}"


def paginate(spec: QuerySpec, limit: int, offset: int, dialect: str | None = None) -> str:
    """Render ``spec`` and wrap it for a single page of ``limit`` rows."""
    return wrap_page(render(spec, dialect=dialect), limit, offset)


def count(spec: QuerySpec, dialect: str | None = None) -> str:
    """Render ``spec`` and wrap it to count every matching row."""
    return wrap_count(render(spec, dialect=dialect))


def page_to_limit_offset(page: int = 1, page_size: int | None = None) -> tuple[int, int]:
    """Convert a 1-based page number into (limit, offset)."""
    if page_size is None:
        page_size = settings.query.default_page_size
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return page_size, (page - 1) * page_size
