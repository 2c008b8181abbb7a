"""Data source endpoints: list connector plugins, sync a source into a table."""

from fastapi import APIRouter, Depends, HTTPException

from querygraph.api.deps import get_connector_registry
from querygraph.schemas.catalog import (
    ConnectorInfo,
    ConnectorListResponse,
    SyncSourceRequest,
    SyncSourceResponse,
)
from querygraph.services.connectors import CONNECTOR_TYPES, ConnectorRegistry

router = APIRouter()


@router.get("/connectors", response_model=ConnectorListResponse)
async def list_connectors(
    registry: ConnectorRegistry = Depends(get_connector_registry),
):
    connectors = [
        ConnectorInfo(
            connector_type=connector_type,
            display_name=CONNECTOR_TYPES[connector_type],
            config=registry.get(connector_type).config(),
        )
        for connector_type in registry.registered()
    ]
    return ConnectorListResponse(connectors=connectors)


@router.post("/sync", response_model=SyncSourceResponse)
async def sync_source(
    body: SyncSourceRequest,
    registry: ConnectorRegistry = Depends(get_connector_registry),
):
    """Discover the source's columns, then load it into ``table_name``."""
    try:
        registry.get(body.connector_type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    schema = await registry.sync_source(body.connector_type, body.table_name, body.config)
    return SyncSourceResponse(table_name=body.table_name, columns=schema.columns)
