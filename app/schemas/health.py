"""
app/schemas/health.py

Response schema for the liveness endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    daily_import_state: str
