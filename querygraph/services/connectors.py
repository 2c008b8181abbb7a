"""Connector interface — how external sources land in the engine as tables.

Connectors (CSV, JSON files, ...) are plugins owned outside this package.
They are invoked once per data-source sync and are otherwise opaque to the
compiler; this module only fixes the contract they must honour and keeps
track of which connector types are registered.
"""

from typing import Any, Protocol, runtime_checkable

import structlog

from querygraph.schemas.catalog import DiscoveredSchema

logger = structlog.stdlib.get_logger(__name__)

LOCAL_FILE_CSV = "LocalFileCSV"
LOCAL_FILE_JSON = "LocalFileJSON"

CONNECTOR_TYPES: dict[str, str] = {
    LOCAL_FILE_CSV: "Local CSV/TSV File",
    LOCAL_FILE_JSON: "Local JSON File",
}


@runtime_checkable
class Connector(Protocol):
    """A plugin that ingests one external source into a table."""

    def config(self) -> list[dict[str, Any]]:
        """Describe the settings the connector needs (name, type, default)."""
        ...

    async def discover(self, config: dict[str, Any]) -> DiscoveredSchema:
        """Inspect the source and report its columns."""
        ...

    async def sync(
        self, table_name: str, config: dict[str, Any], schema: DiscoveredSchema
    ) -> None:
        """Load the source into ``table_name``. Raises on failure."""
        ...


class ConnectorRegistry:
    """Connector instances keyed by connector type."""

    def __init__(self) -> None:
        self._connectors: dict[str, Connector] = {}

    def register(self, connector_type: str, connector: Connector) -> None:
        if connector_type not in CONNECTOR_TYPES:
            raise ValueError("Unknown connector type")
        if not isinstance(connector, Connector):
            raise TypeError(f"{connector!r} does not implement the Connector protocol")
        self._connectors[connector_type] = connector

    def registered(self) -> list[str]:
        """Connector types with a registered plugin, sorted."""
        return sorted(self._connectors)

    def get(self, connector_type: str) -> Connector:
        try:
            return self._connectors[connector_type]
        except KeyError:
            raise ValueError("Unknown connector type") from None

    async def sync_source(
        self, connector_type: str, table_name: str, config: dict[str, Any]
    ) -> DiscoveredSchema:
        """Discover a source's schema, then sync it into ``table_name``."""
        connector = self.get(connector_type)
        schema = await connector.discover(config)
        await connector.sync(table_name, config, schema)
        logger.info(
            "source_synced",
            connector_type=connector_type,
            table=table_name,
            column_count=len(schema.columns),
        )
        return schema
