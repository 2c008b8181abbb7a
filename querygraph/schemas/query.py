"""Pydantic schemas for query compilation and execution endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """A node graph plus the page to fetch.

    ``node_graph`` is validated separately by ``parse_graph`` so payload
    errors surface with the compiler's own messages.
    """

    node_graph: dict[str, Any]
    page: int = Field(default=1, ge=1)
    page_size: int | None = Field(default=None, ge=1)


class CountRequest(BaseModel):
    node_graph: dict[str, Any]


class SqlPreviewRequest(BaseModel):
    node_graph: dict[str, Any]
    paginate: bool = False
    page: int = Field(default=1, ge=1)
    page_size: int | None = Field(default=None, ge=1)


class SqlPreviewResponse(BaseModel):
    sql: str
    node_ids: list[str]


class ColumnInfo(BaseModel):
    name: str


class QueryResultResponse(BaseModel):
    """One page of rows for the selected node."""

    columns: list[ColumnInfo]
    rows: list[dict[str, Any]]
    row_count: int
    page: int
    page_size: int


class RowCountResponse(BaseModel):
    row_count: int


class ErrorResponse(BaseModel):
    error: str  # error class name, e.g. "AggregationAfterSelect"
    detail: str
