"""Dependency injection for FastAPI routes.

All services are provided via Depends() from this module.
Route handlers never instantiate services directly.
"""

from fastapi import Depends, Request

from querygraph.core.engine import DuckDBEngine
from querygraph.services.catalog_service import CatalogService
from querygraph.services.connectors import ConnectorRegistry
from querygraph.services.query_compiler import QueryCompiler
from querygraph.services.query_service import QueryService


async def get_engine(request: Request) -> DuckDBEngine:
    """Return the engine client opened at startup."""
    return request.app.state.engine


async def get_query_compiler() -> QueryCompiler:
    return QueryCompiler()


async def get_query_service(
    compiler: QueryCompiler = Depends(get_query_compiler),
    engine: DuckDBEngine = Depends(get_engine),
) -> QueryService:
    return QueryService(compiler=compiler, engine=engine)


async def get_catalog_service(
    engine: DuckDBEngine = Depends(get_engine),
) -> CatalogService:
    return CatalogService(engine=engine)


async def get_connector_registry(request: Request) -> ConnectorRegistry:
    """Return the registry connector plugins registered into at startup."""
    return request.app.state.connectors
