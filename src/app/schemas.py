from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    data: Any | None = None


class HealthResponse(BaseModel):
    status: str
