"""Table catalog endpoints.

Populates the editor's table node picker and column dropdowns.
"""

from fastapi import APIRouter, Depends, HTTPException

from querygraph.api.deps import get_catalog_service
from querygraph.schemas.catalog import DropTableResponse, TableListResponse, TableSchema
from querygraph.services.catalog_service import CatalogService

router = APIRouter()


@router.get("", response_model=TableListResponse)
async def list_tables(service: CatalogService = Depends(get_catalog_service)):
    return TableListResponse(tables=await service.list_tables())


@router.get("/{table_name}/schema", response_model=TableSchema)
async def get_table_schema(
    table_name: str,
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.table_schema(table_name)


@router.delete("/{table_name}", response_model=DropTableResponse)
async def drop_table(
    table_name: str,
    service: CatalogService = Depends(get_catalog_service),
):
    try:
        message = await service.drop_table(table_name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return DropTableResponse(message=message)
