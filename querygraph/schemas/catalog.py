"""Pydantic schemas for the table catalog and connector schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field

SchemaType = Literal["string", "number", "boolean", "date"]


class SchemaColumn(BaseModel):
    name: str
    type: SchemaType


class TableSchema(BaseModel):
    """Columns of one table, typed with the editor's coarse types."""

    table_name: str
    columns: list[SchemaColumn]


class DiscoveredSchema(BaseModel):
    """What a connector reports about a source before syncing it."""

    columns: list[SchemaColumn]


class TableInfo(BaseModel):
    name: str
    row_count: int = 0


class TableListResponse(BaseModel):
    tables: list[TableInfo]


class DropTableResponse(BaseModel):
    message: str


class ConnectorInfo(BaseModel):
    connector_type: str  # e.g. "LocalFileCSV"
    display_name: str
    config: list[dict[str, Any]]


class ConnectorListResponse(BaseModel):
    connectors: list[ConnectorInfo]


class SyncSourceRequest(BaseModel):
    """Load one external source into ``table_name`` via a connector plugin."""

    connector_type: str
    table_name: str = Field(pattern=r"^\w+$")
    config: dict[str, Any] = {}


class SyncSourceResponse(BaseModel):
    table_name: str
    columns: list[SchemaColumn]
