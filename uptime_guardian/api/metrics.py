from __future__ import annotations

import structlog
from fastapi import APIRouter, Request, Response

from uptime_guardian.observability.metrics import HttpMetrics


router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def metrics(request: Request) -> Response:
    registry: HttpMetrics = request.app.state.metrics
    try:
        payload = registry.render()
    except Exception:
        structlog.get_logger("uptime_guardian.metrics").exception("metrics_collection_failed")
        return Response(status_code=500)
    return Response(content=payload, media_type=registry.content_type)
