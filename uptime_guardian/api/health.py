from __future__ import annotations

from time import monotonic, time

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import ProcessCollector

from uptime_guardian.models.schemas import HealthResponse


ROOT_MESSAGE = "Uptime Guardian service is running."

router = APIRouter(tags=["health"])


def _process_age() -> float:
    """Seconds the process had been alive when this module was imported.

    Uses the start time ``ProcessCollector`` reads from /proc; 0.0 where that
    is unavailable (non-Linux), falling back to import time.
    """
    for family in ProcessCollector(registry=None).collect():
        if family.name == "process_start_time_seconds" and family.samples:
            return max(time() - family.samples[0].value, 0.0)
    return 0.0


# Anchored on the monotonic clock so uptime never goes backwards.
_PROCESS_STARTED = monotonic() - _process_age()


def process_uptime() -> float:
    """Seconds since the process started."""
    return max(monotonic() - _PROCESS_STARTED, 0.0)


@router.api_route("/", methods=["GET", "HEAD"], response_class=PlainTextResponse)
async def index() -> str:
    return ROOT_MESSAGE


@router.api_route("/healthz", methods=["GET", "HEAD"], response_model=HealthResponse)
async def healthz() -> HealthResponse:
    return HealthResponse(status="ok", uptime=process_uptime())
