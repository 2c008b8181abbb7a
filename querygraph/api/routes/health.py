"""Process and engine health checks (unauthenticated)."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from querygraph.api.deps import get_engine
from querygraph.core.engine import DuckDBEngine

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "querygraph"}


@router.get("/health/live")
async def liveness():
    """Always 200 while the process can serve requests."""
    return {"status": "live"}


@router.get("/health/ready")
async def readiness(engine: DuckDBEngine = Depends(get_engine)):
    """200 once DuckDB answers ``SELECT 1``, 503 otherwise."""
    engine_ok = await engine.ping()
    body = {
        "status": "ready" if engine_ok else "not_ready",
        "checks": {"engine": {"status": "ok" if engine_ok else "error"}},
    }
    return JSONResponse(content=body, status_code=200 if engine_ok else 503)
