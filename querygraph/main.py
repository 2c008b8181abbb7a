"""QueryGraph FastAPI application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from querygraph.api.routes import health, metrics, query, sources, tables
from querygraph.core.config import settings
from querygraph.core.engine import get_engine
from querygraph.core.errors import (
    ExecutionError,
    QueryGraphError,
    RenderError,
    TableNotFound,
)
from querygraph.core.logging_config import configure_logging
from querygraph.core.metrics import app_info
from querygraph.core.middleware import ObservabilityMiddleware
from querygraph.schemas.query import ErrorResponse
from querygraph.services.connectors import ConnectorRegistry

configure_logging()

logger = structlog.stdlib.get_logger(__name__)

# Engine and rendering failures are ours; everything else is bad input
_SERVER_SIDE_ERRORS = (RenderError, ExecutionError)


def _status_code(exc: QueryGraphError) -> int:
    if isinstance(exc, TableNotFound):
        return 404
    if isinstance(exc, _SERVER_SIDE_ERRORS):
        return 500
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle events."""
    app_info.info({"version": "0.1.0", "env": settings.app_env})

    # Tests may install their own engine before startup
    if getattr(app.state, "engine", None) is None:
        app.state.engine = get_engine()
    # Connector plugins register themselves on this registry
    if getattr(app.state, "connectors", None) is None:
        app.state.connectors = ConnectorRegistry()

    yield

    app.state.engine.close()


app = FastAPI(
    title="QueryGraph",
    description="Visual query builder backend — compiles node graphs to SQL",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QueryGraphError)
async def querygraph_error_handler(request: Request, exc: QueryGraphError) -> JSONResponse:
    status_code = _status_code(exc)
    if status_code == 500:
        logger.error("request_failed", error=type(exc).__name__, detail=str(exc))
    body = ErrorResponse(error=type(exc).__name__, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


# REST routes live under /api/v1/
app.include_router(health.router, tags=["health"])
app.include_router(query.router, prefix="/api/v1/query", tags=["query"])
app.include_router(tables.router, prefix="/api/v1/tables", tags=["tables"])
app.include_router(sources.router, prefix="/api/v1/sources", tags=["sources"])
app.include_router(metrics.router, tags=["metrics"])
