"""Prometheus scrape endpoint."""

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from querygraph.core.config import settings

router = APIRouter()


@router.get("/metrics")
async def metrics():
    if not settings.metrics_enabled:
        raise HTTPException(status_code=404, detail="Metrics are disabled")
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
