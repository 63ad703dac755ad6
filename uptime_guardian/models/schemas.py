from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    uptime: float = Field(ge=0.0, description="Process uptime in seconds")
